"""
Feed dump adapters, one per vendor.
"""
from typing import Any, Dict, List

from vulnstore.models import (
    DebianCVE,
    MicrosoftCVE,
    MicrosoftProduct,
    RedhatCVE,
    UbuntuCVE,
    Vendor,
)
from .base_adapter import BaseAdapter
from .converters import convert_debian, convert_microsoft, convert_redhat, convert_ubuntu


def _entries(raw: Any) -> List[Dict[str, Any]]:
    """Feeds are either a bare list or wrapped as {"cves": [...]}."""
    if isinstance(raw, dict):
        raw = raw.get("cves", [])
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of CVE entries, got {type(raw).__name__}")
    return raw


class RedhatAdapter(BaseAdapter):
    """Red Hat Security Data API CVE objects."""
    vendor = Vendor.REDHAT

    def normalize(self, raw: Any) -> List[RedhatCVE]:
        return convert_redhat(_entries(raw))


class DebianAdapter(BaseAdapter):
    """
    Debian security tracker JSON dump.

    Expected structure:
    {
        "bash": {
            "CVE-2022-3715": {
                "scope": "local",
                "releases": {"bookworm": {"status": "resolved", ...}}
            }
        }
    }
    """
    vendor = Vendor.DEBIAN

    def normalize(self, raw: Any) -> List[DebianCVE]:
        if not isinstance(raw, dict):
            raise ValueError(f"Expected package-keyed object, got {type(raw).__name__}")
        return convert_debian(raw)


class UbuntuAdapter(BaseAdapter):
    """Ubuntu CVE tracker entries."""
    vendor = Vendor.UBUNTU

    def normalize(self, raw: Any) -> List[UbuntuCVE]:
        return convert_ubuntu(_entries(raw))


class MicrosoftAdapter(BaseAdapter):
    """
    MSRC CVRF JSON document.

    The product tree is kept on the adapter after fetch() since it is indexed
    separately from the CVEs.
    """
    vendor = Vendor.MICROSOFT

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.products: List[MicrosoftProduct] = []

    def normalize(self, raw: Any) -> List[MicrosoftCVE]:
        if not isinstance(raw, dict):
            raise ValueError(f"Expected CVRF document, got {type(raw).__name__}")
        cves, self.products = convert_microsoft(raw)
        return cves


ADAPTERS = {
    Vendor.REDHAT: RedhatAdapter,
    Vendor.DEBIAN: DebianAdapter,
    Vendor.UBUNTU: UbuntuAdapter,
    Vendor.MICROSOFT: MicrosoftAdapter,
}

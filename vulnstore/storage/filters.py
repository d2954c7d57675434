"""
Filtered reads: which CVEs affect a package on a release, in what fix state.

Vendor documents are denormalized (every package and release of a CVE lives
in one document), so a query resolves the package index to candidate CVE IDs,
loads the documents and narrows each one down to the sub-entries matching the
package, the release and the wanted statuses. Documents with nothing left
after narrowing are dropped from the result.

Status semantics:
- Debian:  unfixed = {open}, fixed = {resolved}
- Ubuntu:  unfixed = {needed, pending}, fixed = {released}
- Red Hat: no release nesting; matches the RHEL CPE for the major version and
  excludes "Not affected" and "New" always, "Will not fix" on request
"""
import logging
from types import MappingProxyType
from typing import AbstractSet, Callable, Dict, Mapping, Optional

from vulnstore.errors import UnsupportedRelease
from vulnstore.models import DebianCVE, RedhatCVE, UbuntuCVE, Vendor
from .codenames import DEBIAN_CODENAMES, UBUNTU_CODENAMES, normalize_ubuntu_major
from .reader import CveReader

logger = logging.getLogger(__name__)

REDHAT_CPE_FORMAT = "cpe:/o:redhat:enterprise_linux:{major}"
REDHAT_EXCLUDED_FIX_STATES = frozenset({"Not affected", "New"})
REDHAT_WILL_NOT_FIX = "Will not fix"

DEBIAN_UNFIXED_STATUSES = frozenset({"open"})
DEBIAN_FIXED_STATUSES = frozenset({"resolved"})
UBUNTU_UNFIXED_STATUSES = frozenset({"needed", "pending"})
UBUNTU_FIXED_STATUSES = frozenset({"released"})

DEFAULT_CODENAMES = MappingProxyType({
    Vendor.DEBIAN: DEBIAN_CODENAMES,
    Vendor.UBUNTU: UBUNTU_CODENAMES,
})


def narrow_debian(
    cve: DebianCVE, package_name: str, codename: str, statuses: AbstractSet[str]
) -> Optional[DebianCVE]:
    packages = []
    for pkg in cve.package:
        if pkg.package_name != package_name:
            continue
        releases = [
            rel for rel in pkg.release
            if rel.product_name == codename and rel.status in statuses
        ]
        if releases:
            packages.append(pkg.model_copy(update={"release": releases}))
    if not packages:
        return None
    return cve.model_copy(update={"package": packages})


def narrow_ubuntu(
    cve: UbuntuCVE, package_name: str, codename: str, statuses: AbstractSet[str]
) -> Optional[UbuntuCVE]:
    patches = []
    for patch in cve.patches:
        if patch.package_name != package_name:
            continue
        release_patches = [
            rp for rp in patch.release_patches
            if rp.release_name == codename and rp.status in statuses
        ]
        if release_patches:
            patches.append(patch.model_copy(update={"release_patches": release_patches}))
    if not patches:
        return None
    return cve.model_copy(update={"patches": patches})


def narrow_redhat(
    cve: RedhatCVE, package_name: str, major: str, ignore_will_not_fix: bool
) -> Optional[RedhatCVE]:
    # https://access.redhat.com/documentation/en-us/red_hat_security_data_api/1.0/html/red_hat_security_data_api/cve
    cpe = REDHAT_CPE_FORMAT.format(major=major)
    states = []
    for state in cve.package_state:
        if state.cpe != cpe or state.package_name != package_name:
            continue
        if state.fix_state in REDHAT_EXCLUDED_FIX_STATES:
            continue
        if ignore_will_not_fix and state.fix_state == REDHAT_WILL_NOT_FIX:
            continue
        states.append(state)
    if not states:
        return None
    return cve.model_copy(update={"package_state": states})


_NARROWERS = {
    Vendor.DEBIAN: narrow_debian,
    Vendor.UBUNTU: narrow_ubuntu,
}


class CveFilter:
    """
    Answers per-package, per-release CVE queries for Red Hat, Debian and Ubuntu.

    Microsoft documents are only served by point/multi lookups.
    """

    def __init__(
        self,
        reader: CveReader,
        codenames: Optional[Mapping[Vendor, Mapping[str, str]]] = None,
    ):
        """
        Initialize filter.

        Args:
            reader: Reader used for index and document lookups
            codenames: Per-vendor major version -> codename tables
                (defaults to the built-in Debian and Ubuntu tables)
        """
        self.reader = reader
        if codenames is None:
            codenames = DEFAULT_CODENAMES
        self.codenames = MappingProxyType(dict(codenames))

    def resolve_codename(self, vendor: Vendor, major: str) -> str:
        """
        Map a major version to the vendor's release codename.

        Raises:
            UnsupportedRelease: if the vendor has no mapping for major
        """
        table = self.codenames.get(vendor, {})
        key = normalize_ubuntu_major(major) if vendor is Vendor.UBUNTU else major
        codename = table.get(key)
        if codename is None:
            raise UnsupportedRelease(vendor.field, major)
        return codename

    def get_cves_with_status(
        self,
        vendor: Vendor,
        major: str,
        package_name: str,
        statuses: AbstractSet[str],
    ) -> Dict:
        """
        CVEs affecting package_name on a release, narrowed to wanted statuses.

        Args:
            vendor: Vendor.DEBIAN or Vendor.UBUNTU
            major: Major version, e.g. "12" or "20.04"
            package_name: Source package name
            statuses: Release statuses to keep

        Returns:
            CVE ID -> narrowed document. Empty when the release is unsupported.
        """
        narrow = _NARROWERS.get(vendor)
        if narrow is None:
            raise ValueError(f"Status queries are not supported for {vendor.field}")

        try:
            codename = self.resolve_codename(vendor, major)
        except UnsupportedRelease as e:
            logger.warning(str(e))
            return {}

        return self._collect(
            vendor,
            package_name,
            lambda cve: narrow(cve, package_name, codename, statuses),
        )

    def get_unfixed_cves_redhat(
        self, major: str, package_name: str, ignore_will_not_fix: bool = False
    ) -> Dict[str, RedhatCVE]:
        return self._collect(
            Vendor.REDHAT,
            package_name,
            lambda cve: narrow_redhat(cve, package_name, major, ignore_will_not_fix),
        )

    def get_unfixed_cves_debian(self, major: str, package_name: str) -> Dict[str, DebianCVE]:
        return self.get_cves_with_status(Vendor.DEBIAN, major, package_name, DEBIAN_UNFIXED_STATUSES)

    def get_fixed_cves_debian(self, major: str, package_name: str) -> Dict[str, DebianCVE]:
        return self.get_cves_with_status(Vendor.DEBIAN, major, package_name, DEBIAN_FIXED_STATUSES)

    def get_unfixed_cves_ubuntu(self, major: str, package_name: str) -> Dict[str, UbuntuCVE]:
        return self.get_cves_with_status(Vendor.UBUNTU, major, package_name, UBUNTU_UNFIXED_STATUSES)

    def get_fixed_cves_ubuntu(self, major: str, package_name: str) -> Dict[str, UbuntuCVE]:
        return self.get_cves_with_status(Vendor.UBUNTU, major, package_name, UBUNTU_FIXED_STATUSES)

    def _collect(self, vendor: Vendor, package_name: str, narrow: Callable) -> Dict:
        cve_ids = self.reader.get_cve_ids_by_package(vendor, package_name)
        documents = self.reader.get_available(vendor, cve_ids)

        results = {}
        for cve_id in cve_ids:
            cve = documents.get(cve_id)
            if cve is None:
                logger.warning(f"CVE is not found. vendor: {vendor.field}, CVE-ID: {cve_id}")
                continue
            narrowed = narrow(cve)
            if narrowed is not None:
                results[cve_id] = narrowed
        return results

"""
Point and multi lookups of primary records and index members.

A missing vendor field is reported as None, never as an empty document, so
callers can tell "not stored" apart from "stored with no sub-entries".
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

import redis

from vulnstore.errors import BatchExecFailed, DecodeFailed, StoreCommandFailed
from vulnstore.models import (
    DebianCVE,
    MicrosoftCVE,
    RedhatCVE,
    UbuntuCVE,
    Vendor,
    decode,
)
from .keys import cve_key, index_key, product_key

logger = logging.getLogger(__name__)


class CveReader:
    """Reads vendor documents and secondary index members."""

    def __init__(self, client: redis.Redis):
        self.client = client

    def get_one(self, vendor: Vendor, cve_id: str) -> Optional[Any]:
        """
        Read one vendor document.

        Returns:
            The decoded document, or None if the vendor has no document for cve_id

        Raises:
            StoreCommandFailed: if HGETALL fails
            DecodeFailed: if the stored value does not match the vendor model
        """
        try:
            stored = self.client.hgetall(cve_key(cve_id))
        except redis.RedisError as e:
            raise StoreCommandFailed(f"Failed to get cve {cve_id}. err: {e}") from e

        payload = stored.get(vendor.field)
        if payload is None:
            return None
        return decode(vendor, payload)

    def get_many(self, vendor: Vendor, cve_ids: Iterable[str]) -> Dict[str, Any]:
        """
        Read many vendor documents with one pipelined round trip.

        IDs without a document for this vendor are omitted. A document that
        fails to decode is logged and omitted; it does not abort the read.

        Raises:
            BatchExecFailed: if the pipeline or any command in it fails
        """
        return self._load(vendor, cve_ids, skip_failed_commands=False)

    def get_available(self, vendor: Vendor, cve_ids: Iterable[str]) -> Dict[str, Any]:
        """
        Like get_many, but a command that fails for one ID (e.g. WRONGTYPE on
        a corrupt key) is logged and that ID omitted.

        Raises:
            BatchExecFailed: if the pipeline cannot be sent at all
        """
        return self._load(vendor, cve_ids, skip_failed_commands=True)

    def _load(self, vendor: Vendor, cve_ids: Iterable[str], skip_failed_commands: bool) -> Dict[str, Any]:
        ids = list(dict.fromkeys(cve_ids))
        if not ids:
            return {}

        pipe = self.client.pipeline(transaction=False)
        for cve_id in ids:
            pipe.hgetall(cve_key(cve_id))
        try:
            replies = pipe.execute(raise_on_error=not skip_failed_commands)
        except redis.RedisError as e:
            raise BatchExecFailed(f"Failed to get multi cve json. err: {e}") from e

        results = {}
        for cve_id, stored in zip(ids, replies):
            if isinstance(stored, Exception):
                logger.warning(f"Failed to get cve {cve_id}, skipping. err: {stored}")
                continue
            payload = stored.get(vendor.field)
            if payload is None:
                continue
            try:
                results[cve_id] = decode(vendor, payload)
            except DecodeFailed as e:
                logger.warning(f"Skipping undecodable {vendor.field} document for {cve_id}: {e}")
        return results

    def get_redhat(self, cve_id: str) -> Optional[RedhatCVE]:
        return self.get_one(Vendor.REDHAT, cve_id)

    def get_redhat_multi(self, cve_ids: Iterable[str]) -> Dict[str, RedhatCVE]:
        return self.get_many(Vendor.REDHAT, cve_ids)

    def get_debian(self, cve_id: str) -> Optional[DebianCVE]:
        return self.get_one(Vendor.DEBIAN, cve_id)

    def get_ubuntu(self, cve_id: str) -> Optional[UbuntuCVE]:
        return self.get_one(Vendor.UBUNTU, cve_id)

    def get_microsoft(self, cve_id: str) -> Optional[MicrosoftCVE]:
        return self.get_one(Vendor.MICROSOFT, cve_id)

    def get_microsoft_multi(self, cve_ids: Iterable[str]) -> Dict[str, MicrosoftCVE]:
        return self.get_many(Vendor.MICROSOFT, cve_ids)

    def get_cve_ids_by_package(self, vendor: Vendor, package_name: str) -> List[str]:
        """Members of a package index, in index order (KB ID for Microsoft)."""
        return self._zrange(index_key(vendor, package_name))

    def get_cve_ids_by_kb_id(self, kb_id: str) -> List[str]:
        return self._zrange(index_key(Vendor.MICROSOFT, kb_id))

    def get_product_names(self, product_id: str) -> List[str]:
        return self._zrange(product_key(product_id))

    def _zrange(self, key: str) -> List[str]:
        try:
            return self.client.zrange(key, 0, -1)
        except redis.RedisError as e:
            raise StoreCommandFailed(f"Failed to read index {key}. err: {e}") from e

"""
Write pipeline: persist vendor documents and maintain secondary indexes.

For every document, in input order, one non-transactional pipeline carries:
1. HSET CVE#<id> <VendorField> <json>
2. retention on the primary key
3. ZADD <prefix><package> 0 <id> for each distinct package / KB referenced
4. retention on each index key

Design decisions:
- One pipeline per document: commands are sent and acknowledged together
  but are not atomic (transaction=False)
- A failing pipeline aborts the call; documents written earlier in the same
  call stay written (at-least-attempted, not all-or-nothing)
- Retention is injected at construction: N > 0 sets EXPIRE N, 0 clears any
  existing TTL with PERSIST
- Indexes are append-only: re-inserting a document that dropped a package
  does not remove the stale membership, expiry prunes it
"""
import logging
from typing import TYPE_CHECKING, Iterable, List, Optional

import redis

from vulnstore.errors import BatchExecFailed
from vulnstore.models import (
    DebianCVE,
    MicrosoftCVE,
    MicrosoftProduct,
    RedhatCVE,
    UbuntuCVE,
    Vendor,
    encode,
    model_for,
)
from .keys import INDEX_SCORE, cve_key, index_key, product_key

if TYPE_CHECKING:
    from vulnstore.observability.metrics import RunMetrics

logger = logging.getLogger(__name__)


class CveWriter:
    """
    Writes normalized vendor documents into Redis.

    Callers needing all-or-nothing semantics across a whole input list must
    re-run the insert or reconcile externally.
    """

    def __init__(
        self,
        client: redis.Redis,
        expire_seconds: int = 0,
        metrics: Optional["RunMetrics"] = None,
    ):
        """
        Initialize writer.

        Args:
            client: Connected redis client
            expire_seconds: TTL applied to every touched key, 0 for no expiry
            metrics: Optional RunMetrics updated as documents are written
        """
        if expire_seconds < 0:
            raise ValueError(f"expire_seconds must be >= 0, got {expire_seconds}")
        self.client = client
        self.expire_seconds = expire_seconds
        self.metrics = metrics

    def insert(self, vendor: Vendor, records: Iterable) -> int:
        """
        Write documents for one vendor.

        Args:
            vendor: Vendor the documents belong to
            records: Documents of model_for(vendor); may be a lazy iterable

        Returns:
            Number of documents written

        Raises:
            TypeError: if a record is not the vendor's document type
            EncodeFailed: if a document cannot be serialized
            BatchExecFailed: if a pipeline fails
        """
        model = model_for(vendor)
        written = 0

        for record in records:
            if not isinstance(record, model):
                raise TypeError(
                    f"{vendor.field} insert expects {model.__name__}, got {type(record).__name__}"
                )
            members = self._write_document(vendor, record)
            written += 1
            if self.metrics is not None:
                self.metrics.record_write(vendor.field, len(members))

        logger.debug(f"Inserted {written} {vendor.field} CVEs")
        return written

    def insert_redhat(self, cves: Iterable[RedhatCVE]) -> int:
        return self.insert(Vendor.REDHAT, cves)

    def insert_debian(self, cves: Iterable[DebianCVE]) -> int:
        return self.insert(Vendor.DEBIAN, cves)

    def insert_ubuntu(self, cves: Iterable[UbuntuCVE]) -> int:
        return self.insert(Vendor.UBUNTU, cves)

    def insert_microsoft(
        self,
        cves: Iterable[MicrosoftCVE],
        products: Iterable[MicrosoftProduct] = (),
    ) -> int:
        """
        Write the product index first, in its own pipeline, then the CVEs.

        Returns:
            Number of CVE documents written
        """
        pipe = self.client.pipeline(transaction=False)
        product_count = 0
        for product in products:
            key = product_key(product.product_id)
            pipe.zadd(key, {product.product_name: INDEX_SCORE})
            self._apply_retention(pipe, key)
            product_count += 1

        if product_count:
            self._execute(pipe, f"{product_count} Microsoft products")
            logger.debug(f"Indexed {product_count} Microsoft products")

        return self.insert(Vendor.MICROSOFT, cves)

    def _write_document(self, vendor: Vendor, record) -> List[str]:
        payload = encode(record)
        cve_id = record.identifier

        pipe = self.client.pipeline(transaction=False)
        key = cve_key(cve_id)
        pipe.hset(key, vendor.field, payload)
        self._apply_retention(pipe, key)

        members = record.index_members()
        for member_of in members:
            zkey = index_key(vendor, member_of)
            pipe.zadd(zkey, {cve_id: INDEX_SCORE})
            self._apply_retention(pipe, zkey)

        self._execute(pipe, f"{vendor.field} {cve_id}")
        return members

    def _apply_retention(self, pipe, key: str):
        if self.expire_seconds > 0:
            pipe.expire(key, self.expire_seconds)
        else:
            pipe.persist(key)

    def _execute(self, pipe, what: str):
        try:
            pipe.execute()
        except redis.RedisError as e:
            raise BatchExecFailed(f"Failed to exec pipeline for {what}. err: {e}") from e

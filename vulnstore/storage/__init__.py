"""
Storage layer for the CVE store.

This module provides Redis persistence for vendor CVE documents with
per-package secondary indexes.

Components:
- RedisConnection: Connection lifecycle (open / close / ping)
- CveWriter: Write pipeline (document + indexes + retention)
- CveReader: Point and pipelined multi lookups
- CveFilter: Per-package, per-release fix status queries

Usage:
    from vulnstore.storage import RedisConnection, CveWriter, CveReader, CveFilter

    conn = RedisConnection("redis://localhost:6379/0")
    client = conn.open()

    CveWriter(client, expire_seconds=0).insert_debian(cves)

    cve_filter = CveFilter(CveReader(client))
    unfixed = cve_filter.get_unfixed_cves_debian("12", "bash")
"""
from .connection import FetchMeta, RedisConnection
from .filters import CveFilter
from .reader import CveReader
from .writer import CveWriter

__all__ = [
    "RedisConnection",
    "FetchMeta",
    "CveWriter",
    "CveReader",
    "CveFilter",
]

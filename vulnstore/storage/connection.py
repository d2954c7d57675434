"""
Redis connection lifecycle for the CVE store.

This module provides:
- RedisConnection: owns the single client handle shared by readers and writers
- FetchMeta: fetch metadata reported by the store

Design decisions:
- One client per process; redis-py's connection pool multiplexes concurrent callers
- decode_responses=True so hash fields and zset members come back as str
- PING on open so a bad URL or unreachable server fails fast
- No schema migration: Redis keys are created on write
"""
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import redis

from vulnstore import __version__
from vulnstore.errors import CloseFailed, ConnectionFailed

logger = logging.getLogger(__name__)

LATEST_SCHEMA_VERSION = 2


@dataclass
class FetchMeta:
    """Which library revision and schema version wrote the store."""
    revision: str
    schema_version: int

    def outdated(self) -> bool:
        return self.schema_version != LATEST_SCHEMA_VERSION


def redact_url(url: str) -> str:
    """Hide the password component of a connection URL for log output."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<unparseable url>"
    if parts.password is None:
        return url
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    user = parts.username or ""
    netloc = f"{user}:***@{netloc}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class RedisConnection:
    """
    Manages the Redis client handle.

    Usage:
        with RedisConnection("redis://localhost:6379/0") as client:
            CveWriter(client, expire_seconds=0).insert_debian(cves)
    """

    name = "redis"

    def __init__(self, url: str, socket_timeout: Optional[float] = None):
        """
        Initialize connection manager.

        Args:
            url: redis:// , rediss:// or unix:// connection URL
            socket_timeout: Optional per-command timeout in seconds
        """
        self.url = url
        self.socket_timeout = socket_timeout
        self.client: Optional[redis.Redis] = None

    def open(self) -> redis.Redis:
        """
        Get or create the client, verifying liveness with PING.

        Returns:
            Connected redis client

        Raises:
            ConnectionFailed: if the URL cannot be parsed or PING fails
        """
        if self.client is not None:
            return self.client

        options = {"decode_responses": True}
        if self.socket_timeout is not None:
            options["socket_timeout"] = self.socket_timeout

        client = None
        try:
            client = redis.from_url(self.url, **options)
            client.ping()
        except (ValueError, redis.RedisError) as e:
            if client is not None:
                client.close()
            raise ConnectionFailed(
                f"Failed to open DB. dbtype: {self.name}, dbpath: {redact_url(self.url)}, err: {e}"
            ) from e

        logger.info(f"Connected to {redact_url(self.url)}")
        self.client = client
        return client

    def close(self):
        """Release the client. No-op if never opened."""
        if self.client is None:
            return
        try:
            self.client.close()
        except redis.RedisError as e:
            raise CloseFailed(f"Failed to close DB. Type: {self.name}. err: {e}") from e
        finally:
            self.client = None

    def ping(self) -> bool:
        """Health check against an open client."""
        if self.client is None:
            return False
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def migrate(self):
        """Redis has no schema; nothing to migrate."""
        return None

    def get_fetch_meta(self) -> FetchMeta:
        return FetchMeta(revision=__version__, schema_version=LATEST_SCHEMA_VERSION)

    def upsert_fetch_meta(self, fetch_meta: FetchMeta):
        """Fetch metadata is not persisted in Redis."""
        return None

    def __enter__(self) -> redis.Redis:
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

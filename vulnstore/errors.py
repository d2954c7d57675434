"""
Exception taxonomy for the CVE store.

Every error raised by the storage layer derives from StoreError so callers
can catch the whole family at their boundary. Underlying redis / json
exceptions are always chained with ``raise ... from``.
"""


class StoreError(RuntimeError):
    """Base class for all store failures."""


class ConnectionFailed(StoreError):
    """Raised when the connection URL cannot be parsed or the server does not answer PING."""


class CloseFailed(StoreError):
    """Raised when the client cannot be released cleanly."""


class EncodeFailed(StoreError):
    """Raised when a vendor document cannot be serialized."""


class DecodeFailed(StoreError):
    """Raised when a stored value does not decode into the vendor's model."""


class BatchExecFailed(StoreError):
    """
    Raised when a pipelined command batch fails.

    Pipelines are not transactional: commands of the failing batch that the
    server already applied stay applied, and batches committed earlier in the
    same call are not rolled back.
    """


class StoreCommandFailed(StoreError):
    """Raised when a single store command fails."""


class UnsupportedRelease(StoreError):
    """Raised when a major version has no codename mapping for the vendor."""

    def __init__(self, vendor: str, major: str):
        super().__init__(f"Not supported yet. vendor: {vendor}, major: {major}")
        self.vendor = vendor
        self.major = major

"""
Vendor identifiers.

The enum value is the hash field name under which a vendor's document is
stored in the primary record, so it must never change for existing data.
"""
from enum import Enum


class Vendor(Enum):
    """Upstream vendor whose CVE feed is stored."""
    REDHAT = "RedHat"
    DEBIAN = "Debian"
    UBUNTU = "Ubuntu"
    MICROSOFT = "Microsoft"

    @property
    def field(self) -> str:
        """Hash field name of this vendor's document."""
        return self.value

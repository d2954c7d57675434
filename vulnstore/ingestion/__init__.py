"""
Ingestion layer for the CVE store.

Provides adapters that read already-downloaded vendor feed dumps and
convert them to normalized documents:
- Red Hat Security Data API CVE objects
- Debian security tracker JSON
- Ubuntu CVE tracker entries
- Microsoft MSRC CVRF documents
"""
from .base_adapter import BaseAdapter, SourceHealth
from .converters import convert_debian, convert_microsoft, convert_redhat, convert_ubuntu
from .vendor_adapters import (
    ADAPTERS,
    DebianAdapter,
    MicrosoftAdapter,
    RedhatAdapter,
    UbuntuAdapter,
)

__all__ = [
    "BaseAdapter",
    "SourceHealth",
    "ADAPTERS",
    "RedhatAdapter",
    "DebianAdapter",
    "UbuntuAdapter",
    "MicrosoftAdapter",
    "convert_redhat",
    "convert_debian",
    "convert_ubuntu",
    "convert_microsoft",
]

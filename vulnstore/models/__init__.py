"""
Vendor CVE document models and their JSON codec.

Components:
- Vendor: enum of supported vendors (value = primary record field name)
- RedhatCVE / DebianCVE / UbuntuCVE / MicrosoftCVE: normalized documents
- encode / decode: canonical JSON serialization with schema validation
"""
from .codec import MODELS, decode, encode, model_for
from .documents import (
    DebianCVE,
    DebianPackage,
    DebianRelease,
    MicrosoftCVE,
    MicrosoftKBID,
    MicrosoftProduct,
    RedhatAffectedRelease,
    RedhatCVE,
    RedhatPackageState,
    UbuntuCVE,
    UbuntuPatch,
    UbuntuReleasePatch,
)
from .vendor import Vendor

__all__ = [
    "Vendor",
    "MODELS",
    "encode",
    "decode",
    "model_for",
    "RedhatCVE",
    "RedhatPackageState",
    "RedhatAffectedRelease",
    "DebianCVE",
    "DebianPackage",
    "DebianRelease",
    "UbuntuCVE",
    "UbuntuPatch",
    "UbuntuReleasePatch",
    "MicrosoftCVE",
    "MicrosoftKBID",
    "MicrosoftProduct",
]

"""
Normalized vendor CVE documents.

Each vendor publishes a structurally different feed; these pydantic models
are the normalized shape the store persists. All four share two accessors
used by the write pipeline:

- identifier: the CVE ID the primary record is keyed by
- index_members(): distinct package / KB identifiers the document references,
  in first-seen order, each of which gets a secondary index entry

Design decisions:
- Strict validation: no coercion between JSON types, unknown keys rejected
- Equality is structural, so decode(encode(d)) == d
- Optional scalars default to None, lists default to empty
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _distinct(values) -> List[str]:
    return list(dict.fromkeys(values))


class Document(BaseModel):
    """Base for every stored model: strict types, no extra keys."""
    model_config = ConfigDict(extra="forbid", strict=True)


# Red Hat

class RedhatPackageState(Document):
    """Fix state of one package on one Red Hat product (CPE)."""
    product_name: str
    fix_state: str  # Not affected | New | Will not fix | Fixed | Affected | ...
    package_name: str
    cpe: str


class RedhatAffectedRelease(Document):
    """An erratum that shipped a fix for the CVE."""
    product_name: str
    release_date: Optional[str] = None
    advisory: Optional[str] = None
    package: Optional[str] = None
    cpe: Optional[str] = None


class RedhatCVE(Document):
    name: str
    threat_severity: Optional[str] = None
    public_date: Optional[str] = None
    bugzilla_id: Optional[str] = None
    cvss3_base_score: Optional[str] = None
    cvss3_scoring_vector: Optional[str] = None
    cwe: Optional[str] = None
    statement: Optional[str] = None
    details: List[str] = Field(default_factory=list)
    references: List[str] = Field(default_factory=list)
    affected_release: List[RedhatAffectedRelease] = Field(default_factory=list)
    package_state: List[RedhatPackageState] = Field(default_factory=list)

    @property
    def identifier(self) -> str:
        return self.name

    def index_members(self) -> List[str]:
        return _distinct(p.package_name for p in self.package_state)


# Debian

class DebianRelease(Document):
    """Status of a package on one Debian release."""
    product_name: str  # codename, e.g. bookworm
    status: str  # open | resolved | undetermined
    fixed_version: Optional[str] = None
    urgency: Optional[str] = None
    version: Optional[str] = None


class DebianPackage(Document):
    package_name: str
    release: List[DebianRelease] = Field(default_factory=list)


class DebianCVE(Document):
    cve_id: str
    scope: Optional[str] = None
    description: Optional[str] = None
    package: List[DebianPackage] = Field(default_factory=list)

    @property
    def identifier(self) -> str:
        return self.cve_id

    def index_members(self) -> List[str]:
        return _distinct(p.package_name for p in self.package)


# Ubuntu

class UbuntuReleasePatch(Document):
    """Status of a package on one Ubuntu release."""
    release_name: str  # codename, e.g. focal
    status: str  # needed | pending | released | not-affected | ignored | DNE | ...
    note: Optional[str] = None


class UbuntuPatch(Document):
    package_name: str
    release_patches: List[UbuntuReleasePatch] = Field(default_factory=list)


class UbuntuCVE(Document):
    candidate: str
    public_date: Optional[str] = None
    priority: Optional[str] = None
    description: Optional[str] = None
    ubuntu_description: Optional[str] = None
    references: List[str] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
    bugs: List[str] = Field(default_factory=list)
    patches: List[UbuntuPatch] = Field(default_factory=list)

    @property
    def identifier(self) -> str:
        return self.candidate

    def index_members(self) -> List[str]:
        return _distinct(p.package_name for p in self.patches)


# Microsoft

class MicrosoftKBID(Document):
    kb_id: str
    url: Optional[str] = None


class MicrosoftProduct(Document):
    """Product ID -> display name, indexed separately from CVEs."""
    product_id: str
    product_name: str


class MicrosoftCVE(Document):
    cve_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    publish_date: Optional[str] = None
    last_update_date: Optional[str] = None
    severity: Optional[str] = None
    impact_type: Optional[str] = None
    url: Optional[str] = None
    kb_ids: List[MicrosoftKBID] = Field(default_factory=list)
    product_ids: List[str] = Field(default_factory=list)

    @property
    def identifier(self) -> str:
        return self.cve_id

    def index_members(self) -> List[str]:
        return _distinct(k.kb_id for k in self.kb_ids)

"""
Post-load consistency checks against the store.

After a vendor's documents are written, QualityChecker reads them back and
verifies the two guarantees the write pipeline is responsible for:
- Stored documents: every written document is readable and equal to its input
- Index consistency: every referenced package / KB index contains the CVE ID

Design decisions:
- Each check returns a QualityCheckResult with pass/fail and details
- Reads go through CveReader so the checks exercise the same decode path as callers
- Failures are reported, not raised, so a report can still be produced
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from vulnstore.models import Vendor
from vulnstore.storage.reader import CveReader

MAX_REPORTED_IDS = 10


@dataclass
class QualityCheckResult:
    """
    Result of a single quality check.

    Attributes:
        check_name: Unique identifier for the check
        passed: True if check passed, False otherwise
        message: Human-readable summary of the result
        details: Optional dict with additional context (e.g., failing IDs)
    """
    check_name: str
    passed: bool
    message: str
    details: Dict[str, Any] = None


class QualityChecker:
    """Verifies written documents against the store."""

    def __init__(self, reader: CveReader):
        self.reader = reader

    def run_all_checks(self, vendor: Vendor, documents: Sequence) -> List[QualityCheckResult]:
        return [
            self.check_stored_documents(vendor, documents),
            self.check_index_consistency(vendor, documents),
        ]

    def check_stored_documents(self, vendor: Vendor, documents: Sequence) -> QualityCheckResult:
        """Every document reads back equal to what was written."""
        stored = self.reader.get_many(vendor, [d.identifier for d in documents])

        # Later duplicates overwrite earlier ones in the store
        expected = {d.identifier: d for d in documents}
        mismatched = [
            cve_id for cve_id, doc in expected.items()
            if stored.get(cve_id) != doc
        ]

        name = f"{vendor.field.lower()}_stored_documents"
        if mismatched:
            return QualityCheckResult(
                check_name=name,
                passed=False,
                message=f"{len(mismatched)} of {len(expected)} documents missing or different",
                details={"cve_ids": mismatched[:MAX_REPORTED_IDS]},
            )
        return QualityCheckResult(
            check_name=name,
            passed=True,
            message=f"{len(expected)} documents verified",
        )

    def check_index_consistency(self, vendor: Vendor, documents: Sequence) -> QualityCheckResult:
        """Every package / KB a document references has the CVE ID as an index member."""
        members_cache: Dict[str, set] = {}
        missing = []

        for doc in documents:
            for member_of in doc.index_members():
                if member_of not in members_cache:
                    members_cache[member_of] = set(
                        self.reader.get_cve_ids_by_package(vendor, member_of)
                    )
                if doc.identifier not in members_cache[member_of]:
                    missing.append(f"{member_of}:{doc.identifier}")

        name = f"{vendor.field.lower()}_index_consistency"
        if missing:
            return QualityCheckResult(
                check_name=name,
                passed=False,
                message=f"{len(missing)} index memberships missing",
                details={"memberships": missing[:MAX_REPORTED_IDS]},
            )
        return QualityCheckResult(
            check_name=name,
            passed=True,
            message=f"{len(members_cache)} indexes verified",
        )

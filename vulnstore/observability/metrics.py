"""
Metrics collection for store load runs.

This module provides RunMetrics, a dataclass that tracks observability
metrics for a single load run:
- Documents written per vendor
- Index memberships added per vendor
- Source health indicators
- Errors encountered

Design decisions:
- Single metrics object per run, passed to the writer
- Defaultdict used for automatic initialization of per-vendor counters
- Serializable to_dict() for JSON output
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


@dataclass
class RunMetrics:
    """
    Metrics for a single load run.

    Tracks writes, index memberships, source health and errors.
    """
    run_id: str
    started_at: datetime
    completed_at: datetime = None

    # Key: vendor field name, Value: count
    records_written: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    index_members: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    errors: int = 0

    # Key: source_id, Value: dict with health status
    source_health: Dict[str, Dict] = field(default_factory=dict)

    quality_issues: List[Dict] = field(default_factory=list)

    @property
    def total_written(self) -> int:
        return sum(self.records_written.values())

    def record_write(self, vendor: str, index_members: int):
        """
        Record one document written by the write pipeline.

        Args:
            vendor: Vendor field name (e.g., "Debian")
            index_members: Number of index memberships added for the document
        """
        self.records_written[vendor] += 1
        self.index_members[vendor] += index_members

    def record_error(self, error: str, context: Dict = None):
        """
        Record an error encountered during the run.

        Args:
            error: Error message
            context: Optional dict with additional context (e.g., vendor)
        """
        self.errors += 1
        self.quality_issues.append({
            "type": "error",
            "message": error,
            "context": context or {}
        })

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "records_written": dict(self.records_written),
            "index_members": dict(self.index_members),
            "total_written": self.total_written,
            "errors": self.errors,
            "source_health": self.source_health,
            "quality_issues": self.quality_issues
        }

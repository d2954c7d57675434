"""
Observability layer for store load runs.

Main exports:
- RunMetrics: Tracks metrics for a load run
- QualityChecker: Verifies written documents and index memberships
- QualityCheckResult: Result of a check
- RunReporter: Generates Markdown reports
"""
from .metrics import RunMetrics
from .quality_checks import QualityChecker, QualityCheckResult
from .reporter import RunReporter

__all__ = [
    "RunMetrics",
    "QualityChecker",
    "QualityCheckResult",
    "RunReporter",
]

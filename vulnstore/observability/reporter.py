"""
Markdown reports for store load runs.

A report has a header (run ID, start time, duration), then sections:
Summary, Vendors, Consistency Checks, Source Health and Errors. Sections
with nothing to show are left out, except the summary and the checks.

Tables are rendered with tabulate in GitHub style so the same text reads
well in a terminal and when rendered.
"""
from datetime import datetime
from pathlib import Path
from typing import List, Sequence

from tabulate import tabulate

from .metrics import RunMetrics
from .quality_checks import QualityCheckResult

PASS_MARK = "✓"
FAIL_MARK = "✗"


def _table(rows: Sequence[Sequence], headers: Sequence[str]) -> str:
    return tabulate(rows, headers=headers, tablefmt="github")


def _mark(ok: bool) -> str:
    return PASS_MARK if ok else FAIL_MARK


class RunReporter:
    """Renders RunMetrics and check results as Markdown."""

    def generate_report(
        self,
        metrics: RunMetrics,
        quality_results: List[QualityCheckResult]
    ) -> str:
        """
        Render the report for one run.

        Args:
            metrics: Metrics of a finished run
            quality_results: Results of the post-load consistency checks

        Returns:
            Markdown text
        """
        out = ["# Store Load Report"]
        out.append(f"**Run ID:** {metrics.run_id}")
        out.append(f"**Started:** {metrics.started_at.isoformat()}")
        if metrics.completed_at:
            elapsed = (metrics.completed_at - metrics.started_at).total_seconds()
            out.append(f"**Duration:** {elapsed:.1f} seconds")
        out.append("")

        failed_checks = sum(1 for r in quality_results if not r.passed)
        out.append("## Summary")
        out.append(_table(
            [
                ["Documents Written", metrics.total_written],
                ["Index Memberships", sum(metrics.index_members.values())],
                ["Failed Checks", failed_checks],
                ["Errors", metrics.errors],
            ],
            ["Metric", "Value"],
        ))
        out.append("")

        if metrics.records_written:
            out.append("## Vendors")
            out.append(_table(
                [
                    [vendor, written, metrics.index_members.get(vendor, 0)]
                    for vendor, written in sorted(metrics.records_written.items())
                ],
                ["Vendor", "Documents", "Index Memberships"],
            ))
            out.append("")

        out.append("## Consistency Checks")
        out.append(_table(
            [[_mark(r.passed), r.check_name, r.message] for r in quality_results],
            ["Status", "Check", "Details"],
        ))
        out.append("")

        if metrics.source_health:
            out.append("## Source Health")
            out.append(_table(
                [
                    [_mark(h.get("healthy", False)), source, h.get("records", 0), h.get("error") or ""]
                    for source, h in metrics.source_health.items()
                ],
                ["Status", "Source", "Records", "Error"],
            ))
            out.append("")

        errors = [i for i in metrics.quality_issues if i.get("type") == "error"]
        if errors:
            out.append("## Errors")
            for issue in errors:
                vendor = issue.get("context", {}).get("vendor")
                prefix = f"[{vendor}] " if vendor else ""
                out.append(f"- {prefix}{issue['message']}")
            out.append("")

        return "\n".join(out)

    def save_report(self, report: str, output_dir: Path) -> Path:
        """
        Write the report as load-report-<UTC timestamp>.md.

        Returns:
            Path of the written file
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.utcnow().strftime("%Y%m%d-%H%M%S")
        path = output_dir / f"load-report-{stamp}.md"
        path.write_text(report, encoding="utf-8")
        return path

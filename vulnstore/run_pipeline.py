#!/usr/bin/env python3
"""
Load runner for the CVE store.

Coordinates one load run:
1. Connect: open the Redis connection (fatal on failure)
2. Ingest: read each configured vendor's feed dump through its adapter
3. Write: insert documents (Microsoft: product index first)
4. Verify: read documents and index memberships back
5. Report: write a Markdown run report

A failing vendor is recorded and the run moves on to the next vendor;
documents already written for the failing vendor are not rolled back.

Usage:
    python -m vulnstore.run_pipeline [--config config.yaml] [--vendor debian ...]
"""
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from vulnstore.config import SOURCE_VENDORS, load_config
from vulnstore.errors import StoreError
from vulnstore.ingestion import ADAPTERS, MicrosoftAdapter
from vulnstore.models import Vendor
from vulnstore.observability import QualityChecker, QualityCheckResult, RunMetrics, RunReporter
from vulnstore.storage import CveReader, CveWriter, RedisConnection

logger = logging.getLogger(__name__)


class StorePipeline:
    """
    Loads vendor feed dumps into the store.

    Design decisions:
    - Single run_id tracks the entire execution
    - Retention comes from the config and is handed to the writer explicitly
    - Per-vendor failures are recorded in metrics instead of aborting the run
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize pipeline with configuration.

        Args:
            config_path: Path to YAML configuration file
        """
        self.config = load_config(config_path)
        self.connection = RedisConnection(
            self.config.store.url,
            socket_timeout=self.config.store.socket_timeout,
        )
        self.reporter = RunReporter()
        self.adapters = {
            vendor: ADAPTERS[vendor](source_config)
            for vendor, source_config in self.config.sources.items()
        }

        logger.info(f"Pipeline initialized with config: {config_path}")

    def run(self, vendors: Optional[Iterable[Vendor]] = None) -> RunMetrics:
        """
        Execute a load run.

        Args:
            vendors: Vendors to load; defaults to every configured source

        Returns:
            RunMetrics object with execution statistics

        Raises:
            RuntimeError: if the store cannot be reached
        """
        run_id = f"run_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}"
        metrics = RunMetrics(run_id=run_id, started_at=datetime.utcnow())
        selected = list(vendors) if vendors is not None else list(self.adapters)

        logger.info(f"=== Starting Load Run: {run_id} ===")

        try:
            client = self.connection.open()
        except StoreError as e:
            metrics.record_error(str(e))
            logger.error(f"Load run failed: {e}")
            raise RuntimeError(f"Load run failed: {e}") from e

        try:
            fetch_meta = self.connection.get_fetch_meta()
            if fetch_meta.outdated():
                raise RuntimeError(
                    f"Failed to insert CVEs into DB. SchemaVersion is old: {fetch_meta.schema_version}"
                )

            writer = CveWriter(client, expire_seconds=self.config.store.expire_seconds, metrics=metrics)
            checker = QualityChecker(CveReader(client))
            quality_results: List[QualityCheckResult] = []

            for vendor in selected:
                quality_results.extend(self._load_vendor(vendor, writer, checker, metrics))

            self.connection.upsert_fetch_meta(fetch_meta)

            metrics.completed_at = datetime.utcnow()
            report = self.reporter.generate_report(metrics, quality_results)
            report_path = self.reporter.save_report(report, Path(self.config.report_dir))

            duration = (metrics.completed_at - metrics.started_at).total_seconds()
            logger.info("=== Load Run Complete ===")
            logger.info(f"Duration: {duration:.1f}s")
            logger.info(f"Documents: {metrics.total_written}")
            logger.info(f"Report: {report_path}")
        finally:
            self.connection.close()

        return metrics

    def _load_vendor(
        self,
        vendor: Vendor,
        writer: CveWriter,
        checker: QualityChecker,
        metrics: RunMetrics,
    ) -> List[QualityCheckResult]:
        adapter = self.adapters.get(vendor)
        if adapter is None:
            logger.warning(f"No source configured for {vendor.field}")
            metrics.record_error(f"No source configured for {vendor.field}")
            return []

        logger.info(f"  Fetching {vendor.field} feed")
        documents = adapter.fetch()
        health = adapter.get_health()
        metrics.source_health[adapter.source_id] = {
            "healthy": health.is_healthy,
            "records": health.records_fetched,
            "error": health.error_message
        }
        if not health.is_healthy:
            metrics.record_error(f"Ingestion failed for {vendor.field}: {health.error_message}")
            return []

        logger.info(f"  Insert {vendor.field} CVEs into DB ({len(documents)} documents)")
        try:
            if isinstance(adapter, MicrosoftAdapter):
                writer.insert_microsoft(documents, adapter.products)
            else:
                writer.insert(vendor, documents)
        except StoreError as e:
            logger.error(f"  Failed to insert {vendor.field}: {e}")
            metrics.record_error(f"Insert failed for {vendor.field}: {e}", {"vendor": vendor.field})
            return []

        results = checker.run_all_checks(vendor, documents)
        for result in results:
            if not result.passed:
                logger.warning(f"  Check {result.check_name} failed: {result.message}")
        return results


def main():
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = argparse.ArgumentParser(
        description="Load vendor CVE feed dumps into the Redis CVE store"
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--vendor",
        action="append",
        choices=sorted(SOURCE_VENDORS),
        help="Vendor to load; repeat for several (default: all configured)"
    )
    args = parser.parse_args()

    vendors = [SOURCE_VENDORS[v] for v in args.vendor] if args.vendor else None

    try:
        pipeline = StorePipeline(config_path=args.config)
        metrics = pipeline.run(vendors)

        print("\n" + "=" * 60)
        print("Load Summary")
        print("=" * 60)
        print(f"Run ID: {metrics.run_id}")
        print(f"Documents: {metrics.total_written}")
        print(f"Errors: {metrics.errors}")
        print("\nPer Vendor:")
        for vendor, count in sorted(metrics.records_written.items()):
            print(f"  {vendor:20} {count:6}")
        print("=" * 60)

        sys.exit(1 if metrics.errors else 0)

    except Exception as e:
        logger.error(f"Load run failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

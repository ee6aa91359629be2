import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel

from pallet_reports import settings, data_handler
from pallet_reports.repositories import OperationRepository, SnapshotRepository

logger = logging.getLogger(__name__)


class ReportPipeline(ABC):
    """
    Abstract base class for report pipelines (billing, consolidated, inventory...).
    Follows an Extract -> Transform -> Load pattern:
    repositories -> report composer -> CSV/JSON outputs and webhook.
    """

    def __init__(
        self,
        report_type: str,
        operations: Optional[OperationRepository] = None,
        snapshots: Optional[SnapshotRepository] = None,
        test_mode: bool = False,
    ):
        self.report_type = report_type
        self.operations = operations
        self.snapshots = snapshots
        self.test_mode = test_mode
        # Run details sent along with the rows (criteria, counts, headers).
        self.metadata: dict[str, Any] = {"reportType": report_type}

    def run(self) -> list[BaseModel] | None:
        """
        Orchestrates the pipeline execution and returns the validated rows
        (oldest first), or None when the transformation failed.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        data = self.extract()
        if not any(data.values()):
            logger.warning(f"⚠️ No input data extracted for {self.report_type}.")

        # --- 2. TRANSFORM ---
        rows = self.transform(data)
        if rows is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return None

        # --- 3. LOAD ---
        self.load(rows)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return rows

    @abstractmethod
    def extract(self) -> dict[str, list]:
        """
        Reads the report inputs from the repositories, keyed by input name
        ("records", "snapshots").
        """
        pass

    @abstractmethod
    def transform(self, data: dict[str, list]) -> list[BaseModel] | None:
        """
        Runs the report composer over the extracted inputs.
        Returns the report rows, oldest first.
        """
        pass

    def load(self, rows: list[BaseModel]):
        """
        Saves the rows to disk and posts them to the webhook.
        """
        # 1. Print Run Summary
        logger.info("\n--- Run Summary ---")
        for key, value in self.metadata.items():
            logger.info(f"{key}: {value}")
        logger.info(f"rows: {len(rows)}")

        display_rows = sorted(rows, key=lambda row: row.date, reverse=settings.NEWEST_FIRST)

        # 2. Save Outputs (CSV/JSON)
        if display_rows:
            data_handler.save_outputs(display_rows, f"{self.report_type}_report")
        else:
            logger.warning("No data to save to disk.")

        # 3. Post to Webhook
        if not self.test_mode:
            data_handler.post_to_webhook(
                display_rows,
                metadata=self.metadata,
                report_type=self.report_type,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")

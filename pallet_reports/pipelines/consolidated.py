import logging

from pydantic import ValidationError

from pallet_reports import reports
from pallet_reports.pipeline import ReportPipeline
from pallet_reports.repositories import OperationRepository, SnapshotRepository
from pallet_reports.schemas import ConsolidatedCriteria, ConsolidatedReportRow

logger = logging.getLogger(__name__)


class ConsolidatedPipeline(ReportPipeline):
    def __init__(
        self,
        criteria: ConsolidatedCriteria,
        operations: OperationRepository,
        snapshots: SnapshotRepository,
        test_mode: bool = False,
    ):
        super().__init__(
            "consolidated", operations=operations, snapshots=snapshots, test_mode=test_mode
        )
        self.criteria = criteria
        self.metadata.update(
            {
                "client": criteria.client_name,
                "session": criteria.session.value if criteria.session else "ALL",
                "startDate": criteria.date_range.start.isoformat(),
                "endDate": criteria.date_range.end.isoformat(),
            }
        )

    def extract(self) -> dict[str, list]:
        logger.info("--- Fetching Operations and Inventory Snapshots ---")
        date_range = self.criteria.date_range
        records = self.operations.fetch_operations(date_range, client=self.criteria.client_name)
        snapshots = self.snapshots.fetch_snapshots(date_range)

        # The opening stock comes from the last upload before the range.
        previous = self.snapshots.latest_before(date_range.start)
        if previous is not None:
            logger.info(f"  > Opening stock from snapshot {previous.date}.")
            snapshots = [previous] + snapshots
        else:
            logger.info("  > No earlier snapshot, opening stock is 0.")

        logger.info(f"  > {len(records)} operation(s), {len(snapshots)} snapshot(s).")
        return {"records": records, "snapshots": snapshots}

    def transform(self, data: dict[str, list]) -> list[ConsolidatedReportRow] | None:
        logger.info("\n--- Joining Movements with Inventory ---")
        try:
            rows = reports.consolidated_report(data["records"], data["snapshots"], self.criteria)
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None
        if rows:
            self.metadata["closingPositions"] = rows[-1].stored_positions
        return rows

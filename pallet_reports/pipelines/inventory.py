import logging
from typing import Optional

from pydantic import ValidationError

from pallet_reports import reports
from pallet_reports.pipeline import ReportPipeline
from pallet_reports.repositories import SnapshotRepository
from pallet_reports.schemas import DateRange, InventoryPivotRow, Session

logger = logging.getLogger(__name__)


class InventoryPivotPipeline(ReportPipeline):
    def __init__(
        self,
        date_range: DateRange,
        snapshots: SnapshotRepository,
        clients: Optional[list[str]] = None,
        session: Optional[Session] = None,
        test_mode: bool = False,
    ):
        super().__init__("inventory", snapshots=snapshots, test_mode=test_mode)
        self.date_range = date_range
        self.clients = clients
        self.session = session
        self.metadata.update(
            {
                "session": session.value if session else "ALL",
                "startDate": date_range.start.isoformat(),
                "endDate": date_range.end.isoformat(),
            }
        )

    def extract(self) -> dict[str, list]:
        logger.info("--- Fetching Inventory Snapshots ---")
        snapshots = self.snapshots.fetch_snapshots(self.date_range)
        logger.info(f"  > {len(snapshots)} daily snapshot(s) in range.")
        return {"snapshots": snapshots}

    def transform(self, data: dict[str, list]) -> list[InventoryPivotRow] | None:
        logger.info("\n--- Counting Distinct Pallets per Client ---")
        try:
            report = reports.inventory_pivot_report(
                data["snapshots"], self.date_range, clients=self.clients, session=self.session
            )
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None
        self.metadata["clients"] = report.client_headers
        return report.rows

import logging
from typing import Optional

from pydantic import ValidationError

from pallet_reports import reports
from pallet_reports.pipeline import ReportPipeline
from pallet_reports.repositories import OperationRepository, SnapshotRepository
from pallet_reports.schemas import DateRange, RunningBalance, Session

logger = logging.getLogger(__name__)


class MovementPipeline(ReportPipeline):
    """Running stock of one client, day by day."""

    def __init__(
        self,
        client: str,
        date_range: DateRange,
        operations: OperationRepository,
        snapshots: SnapshotRepository,
        session: Optional[Session] = None,
        test_mode: bool = False,
    ):
        super().__init__("movement", operations=operations, snapshots=snapshots, test_mode=test_mode)
        self.client = client
        self.date_range = date_range
        self.session = session
        self.metadata.update(
            {
                "client": client,
                "session": session.value if session else "ALL",
                "startDate": date_range.start.isoformat(),
                "endDate": date_range.end.isoformat(),
            }
        )

    def extract(self) -> dict[str, list]:
        logger.info("--- Fetching Operations and Opening Snapshot ---")
        records = self.operations.fetch_operations(self.date_range, client=self.client)
        previous = self.snapshots.latest_before(self.date_range.start)
        return {"records": records, "snapshots": [previous] if previous else []}

    def transform(self, data: dict[str, list]) -> list[RunningBalance] | None:
        try:
            balances = reports.movement_report(
                data["records"], data["snapshots"], self.client, self.date_range, self.session
            )
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None
        if balances:
            self.metadata["openingBalance"] = balances[0].opening_balance
            self.metadata["closingBalance"] = balances[-1].closing_balance
        return balances

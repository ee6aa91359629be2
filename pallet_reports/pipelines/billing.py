import logging

from pydantic import ValidationError

from pallet_reports import reports
from pallet_reports.pipeline import ReportPipeline
from pallet_reports.repositories import OperationRepository
from pallet_reports.schemas import BillingCriteria, BillingReportRow

logger = logging.getLogger(__name__)


class BillingPipeline(ReportPipeline):
    def __init__(
        self,
        criteria: BillingCriteria,
        operations: OperationRepository,
        test_mode: bool = False,
    ):
        super().__init__("billing", operations=operations, test_mode=test_mode)
        self.criteria = criteria
        self.metadata.update(
            {
                "client": criteria.client_name,
                "startDate": criteria.date_range.start.isoformat(),
                "endDate": criteria.date_range.end.isoformat(),
            }
        )

    def extract(self) -> dict[str, list]:
        logger.info("--- Fetching Operations ---")
        records = self.operations.fetch_operations(
            self.criteria.date_range, client=self.criteria.client_name
        )
        logger.info(f"  > {len(records)} operation(s) for {self.criteria.client_name}.")
        return {"records": records}

    def transform(self, data: dict[str, list]) -> list[BillingReportRow] | None:
        logger.info("\n--- Aggregating Daily Movements by Session ---")
        try:
            rows = reports.billing_report(data["records"], self.criteria)
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None
        logger.info(f"✅ {len(rows)} day(s) with movements.")
        return rows

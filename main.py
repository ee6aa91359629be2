import argparse
import logging
from datetime import date

from pallet_reports import parsers, reports, settings, snapshots as snapshot_reducer
from pallet_reports.logger import setup_logger
from pallet_reports.pipelines.billing import BillingPipeline
from pallet_reports.pipelines.consolidated import ConsolidatedPipeline
from pallet_reports.pipelines.inventory import InventoryPivotPipeline
from pallet_reports.pipelines.movements import MovementPipeline
from pallet_reports.schemas import BillingCriteria, ConsolidatedCriteria, DateRange, OperationKind
from pallet_reports.sessions import parse_session

logger = logging.getLogger(__name__)

REPORTS = ["billing", "clients", "consolidated", "inventory", "movement", "trace"]
ALL_DATES = DateRange(start=date.min, end=date.max)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Warehouse pallet movement and inventory reports.")
    parser.add_argument("report", choices=REPORTS)
    parser.add_argument("--start", type=date.fromisoformat, help="First day (YYYY-MM-DD).")
    parser.add_argument("--end", type=date.fromisoformat, help="Last day (YYYY-MM-DD).")
    parser.add_argument("--client", action="append", dest="clients", default=[],
                        help="Client name. Repeat for several clients (inventory report).")
    parser.add_argument("--session", help="Session code: CO, RE or SE.")
    parser.add_argument("--kind", choices=[kind.value for kind in OperationKind])
    parser.add_argument("--order-type", action="append", dest="order_types", default=[])
    parser.add_argument("--order-number")
    parser.add_argument("--pallet", help="Pallet number (trace report).")
    parser.add_argument("--test", action="store_true", help="Skip the webhook post.")
    parser.add_argument("--log-level", help="Overrides LOG_LEVEL (DEBUG, INFO, WARNING...).")
    return parser


def run_process(args: argparse.Namespace):
    """Main orchestration function: load the inputs, then run the requested report."""
    operations, snapshots = parsers.load_repositories(settings.INPUT_DIR)
    client = args.clients[0] if args.clients else ""
    session = parse_session(args.session)

    if args.report == "clients":
        owners = snapshot_reducer.clients_with_inventory(snapshots.fetch_snapshots(ALL_DATES))
        logger.info(f"Clients with inventory ({len(owners)}):")
        for owner in owners:
            logger.info(f"  - {owner}")
        return owners

    if args.report != "inventory" and not client.strip():
        logger.error(f"❌ --client is required for the {args.report} report.")
        return

    if args.report == "trace":
        records = operations.fetch_operations(ALL_DATES, client=client)
        result = reports.pallet_traceability(records, args.pallet, client)
        logger.info(result.model_dump_json(indent=2))
        return

    if args.start is None or args.end is None:
        logger.error("❌ --start and --end are required for this report.")
        return
    date_range = DateRange(start=args.start, end=args.end)

    if args.report == "billing":
        pipeline = BillingPipeline(
            BillingCriteria(
                client_name=client,
                date_range=date_range,
                kind=OperationKind(args.kind) if args.kind else None,
                order_types=args.order_types,
                order_number=args.order_number,
            ),
            operations,
            test_mode=args.test,
        )
    elif args.report == "consolidated":
        pipeline = ConsolidatedPipeline(
            ConsolidatedCriteria(client_name=client, date_range=date_range, session=session),
            operations,
            snapshots,
            test_mode=args.test,
        )
    elif args.report == "inventory":
        pipeline = InventoryPivotPipeline(
            date_range, snapshots, clients=args.clients or None, session=session, test_mode=args.test
        )
    else:
        pipeline = MovementPipeline(
            client, date_range, operations, snapshots, session=session, test_mode=args.test
        )

    pipeline.run()


if __name__ == "__main__":
    args = build_parser().parse_args()
    setup_logger(args.report, args.log_level)
    run_process(args)

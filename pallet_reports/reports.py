"""
Report composers. Each report is a thin combination of the shared
aggregation, balance and snapshot functions; no report re-implements counting.
"""

from typing import Any, Iterable, Optional

import pandas as pd

from . import utils
from .aggregator import aggregate, aggregate_by_session, movements_for_client
from .balances import compute_balances, opening_balance
from .schemas import (
    BillingCriteria,
    BillingReportRow,
    ConsolidatedCriteria,
    ConsolidatedReportRow,
    DateRange,
    InventoryPivotReport,
    OperationKind,
    OperationRecord,
    PalletMovement,
    PalletTraceability,
    RunningBalance,
    Session,
    WeightMode,
)
from .snapshots import coerce_snapshots, reduce_snapshot_pivot


def _require_client(client: str) -> str:
    if not client or not client.strip():
        raise ValueError("A client name is required for this report.")
    return client.strip()


def _same_client(record: OperationRecord, client: str) -> bool:
    return record.client_name.lower() == client.strip().lower()


def _passes_billing_filters(record: OperationRecord, criteria: BillingCriteria) -> bool:
    if criteria.kind is not None and record.kind is not criteria.kind:
        return False
    if criteria.order_types and record.order_type not in criteria.order_types:
        return False
    if criteria.order_number and record.order_number != criteria.order_number.strip():
        return False
    return True


def billing_report(
    records: Iterable[OperationRecord], criteria: BillingCriteria
) -> list[BillingReportRow]:
    """
    Daily pallets received and dispatched by one client, split by session.
    Days where every session is zero are left out. Oldest first.
    """
    client = _require_client(criteria.client_name)
    selected = [
        record
        for record in records
        if _same_client(record, client) and _passes_billing_filters(record, criteria)
    ]

    merged = pd.DataFrame(columns=["date"])
    for session, movements in aggregate_by_session(selected, criteria.date_range).items():
        code = session.value.lower()
        session_df = pd.DataFrame(
            [
                {
                    "date": day,
                    f"received_{code}": movement.pallets_received,
                    f"dispatched_{code}": movement.pallets_dispatched,
                }
                for day, movement in movements_for_client(movements, client).items()
            ],
            columns=["date", f"received_{code}", f"dispatched_{code}"],
        )
        merged = pd.merge(merged, session_df, on="date", how="outer")

    if merged.empty:
        return []

    count_columns = [column for column in merged.columns if column != "date"]
    merged[count_columns] = merged[count_columns].fillna(0).astype(int)
    merged = merged[merged[count_columns].sum(axis=1) > 0].sort_values("date")

    return [BillingReportRow(**row) for row in merged.to_dict("records")]


def movement_report(
    records: Iterable[OperationRecord],
    snapshots: Iterable[Any],
    client: str,
    date_range: DateRange,
    session: Optional[Session] = None,
) -> list[RunningBalance]:
    """Day-by-day running stock of one client, seeded from the last snapshot before the range."""
    client = _require_client(client)
    if date_range.is_empty:
        return []

    movements = aggregate(
        (record for record in records if _same_client(record, client)), date_range, session
    )
    opening = opening_balance(snapshots, client, date_range.start, session)
    return compute_balances(
        opening,
        movements_for_client(movements, client),
        date_range,
        client=client,
        session=session,
    )


def inventory_pivot_report(
    snapshots: Iterable[Any],
    date_range: DateRange,
    clients: Optional[list[str]] = None,
    session: Optional[Session] = None,
) -> InventoryPivotReport:
    if date_range.is_empty:
        return InventoryPivotReport()
    in_range = [
        snapshot for snapshot in coerce_snapshots(snapshots) if date_range.contains(snapshot.date)
    ]
    return reduce_snapshot_pivot(in_range, clients=clients, session=session)


def consolidated_report(
    records: Iterable[OperationRecord],
    snapshots: Iterable[Any],
    criteria: ConsolidatedCriteria,
) -> list[ConsolidatedReportRow]:
    """
    Movements joined with the uploaded inventory counts by date, plus the
    running count of stored positions.

    The join is an outer join: a date known to only one side still gets a
    row, with the other side at zero.
    """
    client = _require_client(criteria.client_name)
    date_range = criteria.date_range
    if date_range.is_empty:
        return []

    snapshots = coerce_snapshots(snapshots)
    movements = movements_for_client(
        aggregate(
            (record for record in records if _same_client(record, client)),
            date_range,
            criteria.session,
        ),
        client,
    )
    movement_df = pd.DataFrame(
        [
            {
                "date": day,
                "pallets_received": movement.pallets_received,
                "pallets_dispatched": movement.pallets_dispatched,
            }
            for day, movement in movements.items()
        ],
        columns=["date", "pallets_received", "pallets_dispatched"],
    )

    pivot = inventory_pivot_report(snapshots, date_range, clients=[client], session=criteria.session)
    inventory_df = pd.DataFrame(
        [{"date": row.date, "inventory_count": sum(row.client_data.values())} for row in pivot.rows],
        columns=["date", "inventory_count"],
    )

    joined = pd.merge(movement_df, inventory_df, on="date", how="outer").fillna(0)
    by_date = {row["date"]: row for row in joined.to_dict("records")}

    opening = opening_balance(snapshots, client, date_range.start, criteria.session)
    balances = compute_balances(opening, movements, date_range, client=client, session=criteria.session)

    rows = []
    for balance in balances:
        day_data = by_date.get(balance.date, {})
        rows.append(
            ConsolidatedReportRow(
                date=balance.date,
                pallets_received=balance.pallets_received,
                pallets_dispatched=balance.pallets_dispatched,
                inventory_count=int(day_data.get("inventory_count", 0)),
                stored_positions=balance.closing_balance,
            )
        )
    return rows


def pallet_traceability(
    records: Iterable[OperationRecord], pallet_id: Any, client: str
) -> PalletTraceability:
    """
    Where a pallet came in and every dispatch that carried it, for one client.
    Only variable-weight operations track individual pallets.
    """
    client = _require_client(client)
    number = utils.parse_number(pallet_id)
    wanted = int(number) if number is not None else 0
    result = PalletTraceability(pallet_id=wanted, client=client)
    if wanted <= 0:
        return result

    candidates = sorted(
        (
            record
            for record in records
            if record.weight_mode is WeightMode.VARIABLE and _same_client(record, client)
        ),
        key=lambda record: record.operation_date,
    )
    for record in candidates:
        items = [item for item in record.all_items() if item.pallet_id == wanted]
        if not items:
            continue
        movement = PalletMovement(
            record_id=record.id,
            kind=record.kind,
            date=record.operation_date,
            order_number=record.order_number,
            created_by=record.created_by,
            items=items,
        )
        if record.kind is OperationKind.RECEPTION:
            # A pallet code is received once per client; later receptions are ignored.
            if result.reception is None:
                result.reception = movement
        else:
            result.dispatches.append(movement)
    return result

from datetime import date
from typing import Iterable, Optional

import pandas as pd

from .normalizer import normalize
from .schemas import DailyMovement, DateRange, OperationKind, OperationRecord, Session
from .sessions import REPORT_SESSIONS

MovementKey = tuple[date, str]

MOVEMENT_COLUMNS = [
    "pallets_received",
    "pallets_dispatched",
    "net_weight_received",
    "net_weight_dispatched",
]


def _contribution(record: OperationRecord, session: Optional[Session]) -> dict | None:
    totals = normalize(record, session)
    row = {
        "date": record.operation_date,
        "client": record.client_name,
        "pallets_received": 0,
        "pallets_dispatched": 0,
        "net_weight_received": 0.0,
        "net_weight_dispatched": 0.0,
    }
    if record.kind is OperationKind.RECEPTION:
        row["pallets_received"] = totals.pallet_count
        row["net_weight_received"] = totals.net_weight
    elif record.kind is OperationKind.DISPATCH:
        row["pallets_dispatched"] = totals.pallet_count
        row["net_weight_dispatched"] = totals.net_weight
    else:
        return None

    # Processing orders release pallets on the same day they are received.
    if session is None:
        row["pallets_dispatched"] += sum(record.processed_output.values())
    else:
        row["pallets_dispatched"] += record.processed_output.get(session, 0)
    return row


def aggregate(
    records: Iterable[OperationRecord],
    date_range: DateRange,
    session: Optional[Session] = None,
) -> dict[MovementKey, DailyMovement]:
    """
    Groups operation records into daily received/dispatched totals per client.

    Records are bucketed by their operation date, not their creation time.
    Only (date, client) pairs with at least one contributing record appear;
    filling the empty days is the balance calculator's job.
    """
    if date_range.is_empty:
        return {}

    rows = []
    for record in records:
        if not date_range.contains(record.operation_date):
            continue
        row = _contribution(record, session)
        if row is not None:
            rows.append(row)

    if not rows:
        return {}

    grouped = (
        pd.DataFrame(rows)
        .groupby(["date", "client"], sort=True)[MOVEMENT_COLUMNS]
        .sum()
        .reset_index()
    )
    return {
        (row["date"], row["client"]): DailyMovement(session=session, **row)
        for row in grouped.to_dict("records")
    }


def aggregate_by_session(
    records: Iterable[OperationRecord], date_range: DateRange
) -> dict[Session, dict[MovementKey, DailyMovement]]:
    """Runs the aggregation once per report session. A record may feed several."""
    records = list(records)
    return {session: aggregate(records, date_range, session) for session in REPORT_SESSIONS}


def movements_for_client(
    movements: dict[MovementKey, DailyMovement], client: str
) -> dict[date, DailyMovement]:
    """Date-keyed view of one client's movements (client names compared trimmed, case-insensitive)."""
    wanted = client.strip().lower()
    by_date: dict[date, DailyMovement] = {}
    for (day, name), movement in movements.items():
        if name.strip().lower() != wanted:
            continue
        if day in by_date:
            # Same client written with different casing on the same day.
            current = by_date[day]
            movement = current.model_copy(
                update={
                    column: getattr(current, column) + getattr(movement, column)
                    for column in MOVEMENT_COLUMNS
                }
            )
        by_date[day] = movement
    return by_date

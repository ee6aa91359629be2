from datetime import date
from typing import Iterable, Mapping, Optional

from .schemas import DailyMovement, DateRange, InventorySnapshot, RunningBalance, Session
from .snapshots import latest_snapshot_before, reduce_snapshot


def compute_balances(
    opening: int,
    movements: Mapping[date, DailyMovement],
    date_range: DateRange,
    client: str = "",
    session: Optional[Session] = None,
) -> list[RunningBalance]:
    """
    End-of-day stock for every day of the range, oldest first.

    Days without movements carry the previous balance unchanged. Each
    closing balance is the next day's opening balance; balances are never
    clamped, so bad data can drive them negative.
    """
    balances: list[RunningBalance] = []
    carry = opening
    for day in date_range.days():
        movement = movements.get(day)
        received = movement.pallets_received if movement else 0
        dispatched = movement.pallets_dispatched if movement else 0
        closing = carry + received - dispatched
        balances.append(
            RunningBalance(
                date=day,
                client=client,
                session=session,
                opening_balance=carry,
                pallets_received=received,
                pallets_dispatched=dispatched,
                closing_balance=closing,
            )
        )
        carry = closing
    return balances


def opening_balance(
    snapshots: Iterable[InventorySnapshot],
    client: str,
    before: date,
    session: Optional[Session] = None,
) -> int:
    """Stock of the latest snapshot strictly before the given day, or 0 without one."""
    snapshot = latest_snapshot_before(snapshots, before)
    if snapshot is None:
        return 0
    return reduce_snapshot(snapshot, client, session)

from typing import NamedTuple, Optional

from . import settings
from .schemas import LineItem, OperationKind, OperationRecord, Session, WeightMode
from .sessions import classify_session


class PalletTotals(NamedTuple):
    pallet_count: int
    net_weight: float


def _in_session(item: LineItem, session: Optional[Session]) -> bool:
    return session is None or classify_session(item.temperature) is session


def _is_counted_pallet(item: LineItem, kind: OperationKind) -> bool:
    if item.pallet_id is None or item.pallet_id <= 0:
        return False
    if kind is OperationKind.DISPATCH:
        return not item.is_picking and item.pallet_id != settings.PICKING_PALLET_ID
    return True


def _fixed_totals(items: list[LineItem], session: Optional[Session]) -> PalletTotals:
    # Fixed-weight lines already carry their own pallet count.
    selected = [item for item in items if _in_session(item, session)]
    return PalletTotals(
        pallet_count=int(sum(item.pallets for item in selected)),
        net_weight=sum(item.computed_net_weight for item in selected),
    )


def _summary_totals(rows: list[LineItem], session: Optional[Session]) -> PalletTotals:
    selected = [row for row in rows if _in_session(row, session)]
    return PalletTotals(
        pallet_count=int(sum(row.total_pallets for row in selected)),
        net_weight=sum(row.total_net_weight for row in selected),
    )


def _detailed_totals(
    items: list[LineItem], kind: OperationKind, session: Optional[Session]
) -> PalletTotals:
    # A pallet belongs to the session of the first line that carries its id.
    pallet_sessions: dict[int, Session] = {}
    net_weight = 0.0
    for item in items:
        item_session = classify_session(item.temperature)
        if _is_counted_pallet(item, kind):
            pallet_sessions.setdefault(item.pallet_id, item_session)
        if session is None or item_session is session:
            net_weight += item.computed_net_weight

    pallet_count = sum(
        1 for pallet_session in pallet_sessions.values()
        if session is None or pallet_session is session
    )
    return PalletTotals(pallet_count=pallet_count, net_weight=net_weight)


def normalize(record: OperationRecord, session: Optional[Session] = None) -> PalletTotals:
    """
    Canonical pallet count and net weight of one operation record.

    Fixed-weight records sum their pre-counted pallets. Variable-weight
    records are either summary-form (sum the totals of the summary rows) or
    detailed-form (count distinct pallet ids), never a mix of both.

    When a session is given only lines classified into it are counted.
    """
    items = record.all_items()
    if not items:
        return PalletTotals(pallet_count=0, net_weight=0.0)

    if record.weight_mode is WeightMode.FIXED:
        return _fixed_totals(items, session)

    if record.is_summary_form:
        # An explicit tag makes every row a summary row; otherwise the
        # pallet_id == 0 rows are the summary.
        rows = items if record.summary_form else [item for item in items if item.is_summary_row]
        return _summary_totals(rows, session)

    return _detailed_totals(items, record.kind, session)

import logging
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Union

import pandas as pd

from . import ingestion
from .schemas import InventoryPivotReport, InventoryPivotRow, InventoryRow, InventorySnapshot, Session

logger = logging.getLogger(__name__)

SessionFilter = Union[Session, str, None]


def coerce_snapshots(documents: Iterable[Any]) -> list[InventorySnapshot]:
    """
    Accepts parsed snapshots or raw stored documents. Documents with the wrong
    shape are skipped with a warning instead of failing the whole report.
    """
    snapshots = []
    for document in documents:
        if isinstance(document, InventorySnapshot):
            snapshots.append(document)
            continue
        if isinstance(document, Mapping):
            snapshot = ingestion.snapshot_from_document(document)
            if snapshot is not None:
                snapshots.append(snapshot)
            continue
        logger.warning(f"⚠️ Skipping inventory document of unexpected type {type(document).__name__}.")
    return snapshots


def _session_code(session: SessionFilter) -> str | None:
    if session is None:
        return None
    code = session.value if isinstance(session, Session) else str(session)
    return code.strip().lower() or None


def _owner_key(owner: str) -> str:
    return owner.strip().lower()


def _row_matches_session(row: InventoryRow, code: str | None) -> bool:
    return code is None or row.session.strip().lower() == code


def reduce_snapshot(
    snapshot: InventorySnapshot, client: str, session: SessionFilter = None
) -> int:
    """Distinct pallets a client holds in one daily snapshot."""
    code = _session_code(session)
    wanted = _owner_key(client)
    pallets = {
        row.pallet_id
        for row in snapshot.rows
        if row.pallet_id is not None
        and _owner_key(row.owner) == wanted
        and _row_matches_session(row, code)
    }
    return len(pallets)


def reduce_snapshot_pivot(
    snapshots: Iterable[Any],
    clients: Optional[list[str]] = None,
    session: SessionFilter = None,
) -> InventoryPivotReport:
    """
    Distinct pallet counts per client per day, one column per client.

    Without a client list every owner seen becomes a column. With one, other
    owners are dropped entirely and listed clients never seen get no column.
    """
    code = _session_code(session)
    wanted = {_owner_key(name) for name in clients or [] if name.strip()}

    # Owner spellings differ between uploads; the first one seen names the column.
    display_names: dict[str, str] = {}
    records = []
    for snapshot in coerce_snapshots(snapshots):
        for row in snapshot.rows:
            if not row.owner or not _row_matches_session(row, code):
                continue
            key = _owner_key(row.owner)
            if wanted and key not in wanted:
                continue
            display_names.setdefault(key, row.owner)
            records.append({"date": snapshot.date, "owner": key, "pallet_id": row.pallet_id})

    if not records:
        return InventoryPivotReport()

    df = pd.DataFrame(records)
    pivot = (
        df.groupby(["date", "owner"])["pallet_id"]
        .nunique()
        .unstack("owner", fill_value=0)
        .sort_index()
    )
    keys = sorted(pivot.columns, key=lambda key: display_names[key])

    rows = [
        InventoryPivotRow(
            date=day,
            client_data={display_names[key]: int(pivot.at[day, key]) for key in keys},
        )
        for day in pivot.index
    ]
    headers = [display_names[key] for key in keys]
    return InventoryPivotReport(client_headers=headers, rows=rows)


def latest_snapshot_before(
    snapshots: Iterable[Any], day: date
) -> InventorySnapshot | None:
    earlier = [snapshot for snapshot in coerce_snapshots(snapshots) if snapshot.date < day]
    if not earlier:
        return None
    return max(earlier, key=lambda snapshot: snapshot.date)


def clients_with_inventory(snapshots: Iterable[Any]) -> list[str]:
    """Owners holding stock in any snapshot, one spelling per owner (the first seen)."""
    owners: dict[str, str] = {}
    for snapshot in coerce_snapshots(snapshots):
        for row in snapshot.rows:
            if row.owner:
                owners.setdefault(_owner_key(row.owner), row.owner)
    return sorted(owners.values())

"""
Shared fixtures: small builders for operation records and inventory snapshots.
"""

from datetime import date

import pytest

from pallet_reports import settings
from pallet_reports.schemas import (
    DateRange,
    InventoryRow,
    InventorySnapshot,
    LineItem,
    OperationKind,
    OperationRecord,
    WeightMode,
)

FROZEN = -18
COLD = 4
DRY = 20


@pytest.fixture
def make_record():
    """Builds an OperationRecord; line items may be given as dicts."""

    def _make(
        kind=OperationKind.RECEPTION,
        weight_mode=WeightMode.VARIABLE,
        day=date(2024, 1, 1),
        client="ACME",
        items=(),
        **extra,
    ) -> OperationRecord:
        line_items = [item if isinstance(item, LineItem) else LineItem(**item) for item in items]
        return OperationRecord(
            id=extra.pop("id", f"{kind.value}-{day.isoformat()}"),
            client_name=client,
            kind=kind,
            weight_mode=weight_mode,
            operation_date=day,
            line_items=line_items,
            **extra,
        )

    return _make


@pytest.fixture
def pallets():
    """Detailed variable-weight line items, one per pallet id, all at one temperature."""

    def _pallets(*pallet_ids, temperature=FROZEN, net_weight=100.0):
        return [
            {"pallet_id": pallet_id, "net_weight": net_weight, "temperature": temperature}
            for pallet_id in pallet_ids
        ]

    return _pallets


@pytest.fixture
def make_snapshot():
    """Builds a snapshot from (owner, pallet_id, session) tuples."""

    def _make(day, *rows) -> InventorySnapshot:
        return InventorySnapshot(
            date=day,
            rows=[
                InventoryRow(owner=owner, pallet_id=pallet_id, session=session)
                for owner, pallet_id, session in rows
            ],
        )

    return _make


@pytest.fixture
def january() -> DateRange:
    return DateRange(start=date(2024, 1, 1), end=date(2024, 1, 5))


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    """Redirects report outputs to a temporary directory."""
    monkeypatch.setattr(settings, "OUTPUT_DIR", tmp_path / "output")
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    return tmp_path / "output"

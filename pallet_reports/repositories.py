from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Optional

from .schemas import DateRange, InventorySnapshot, OperationRecord


class OperationRepository(ABC):
    """Read access to submitted receptions and dispatches."""

    @abstractmethod
    def fetch_operations(
        self, date_range: DateRange, client: Optional[str] = None
    ) -> list[OperationRecord]:
        """Records whose operation date falls in the range (inclusive), optionally for one client."""
        pass


class SnapshotRepository(ABC):
    """Read access to the uploaded daily inventory snapshots."""

    @abstractmethod
    def fetch_snapshots(self, date_range: DateRange) -> list[InventorySnapshot]:
        pass

    @abstractmethod
    def latest_before(self, day: date) -> InventorySnapshot | None:
        pass


class InMemoryOperationRepository(OperationRepository):
    def __init__(self, records: Iterable[OperationRecord] = ()):
        self._records = list(records)

    def add(self, record: OperationRecord):
        self._records.append(record)

    def fetch_operations(
        self, date_range: DateRange, client: Optional[str] = None
    ) -> list[OperationRecord]:
        wanted = client.strip().lower() if client else None
        return [
            record
            for record in self._records
            if date_range.contains(record.operation_date)
            and (wanted is None or record.client_name.lower() == wanted)
        ]


class InMemorySnapshotRepository(SnapshotRepository):
    """Snapshots keyed by date; uploading a date again replaces that day's rows."""

    def __init__(self, snapshots: Iterable[InventorySnapshot] = ()):
        self._by_date: dict[date, InventorySnapshot] = {}
        for snapshot in snapshots:
            self.upsert(snapshot)

    def upsert(self, snapshot: InventorySnapshot):
        self._by_date[snapshot.date] = snapshot

    def fetch_snapshots(self, date_range: DateRange) -> list[InventorySnapshot]:
        return [
            self._by_date[day]
            for day in sorted(self._by_date)
            if date_range.contains(day)
        ]

    def latest_before(self, day: date) -> InventorySnapshot | None:
        earlier = [snapshot_date for snapshot_date in self._by_date if snapshot_date < day]
        if not earlier:
            return None
        return self._by_date[max(earlier)]

import datetime as dt
from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import BaseModel, Field, field_validator

from . import utils


class Session(str, Enum):
    """Temperature-based storage category used for billing segmentation."""

    FROZEN = "CO"
    REFRIGERATED = "RE"
    DRY = "SE"
    UNCLASSIFIABLE = "N/A"


class OperationKind(str, Enum):
    RECEPTION = "reception"
    DISPATCH = "dispatch"


class WeightMode(str, Enum):
    FIXED = "fixed"
    VARIABLE = "variable"


class DateRange(BaseModel):
    """Inclusive calendar range. A range whose start is after its end is empty."""

    start: dt.date
    end: dt.date

    @property
    def is_empty(self) -> bool:
        return self.start > self.end

    def contains(self, day: dt.date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[dt.date]:
        return utils.iter_days(self.start, self.end)


# --- Operation records ---


class LineItem(BaseModel):
    """
    One row of a reception or dispatch. A pallet id of 0 marks a summary row
    (pre-aggregated totals per product description) rather than a pallet.
    """

    pallet_id: Optional[int] = 0
    description: str = ""
    lot: str = ""
    presentation: str = ""
    quantity_per_pallet: float = 0
    gross_weight: float = 0
    tara_pallet: float = 0
    tara_box: float = 0
    net_weight: Optional[float] = None
    pallets: float = 0
    total_pallets: float = 0
    total_net_weight: float = 0
    temperature: Any = None
    is_picking: bool = False

    @field_validator("pallet_id", mode="before")
    @classmethod
    def _coerce_pallet_id(cls, value: Any) -> Optional[int]:
        # Blank counts as 0 (summary row); junk is neither a pallet nor a summary.
        if value is None or value == "":
            return 0
        number = utils.parse_number(value)
        return int(number) if number is not None else None

    @field_validator(
        "quantity_per_pallet",
        "gross_weight",
        "tara_pallet",
        "tara_box",
        "total_net_weight",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, value: Any) -> float:
        return utils.to_number(value)

    @field_validator("pallets", "total_pallets", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> float:
        # A negative pallet count is malformed input, not a return.
        return max(utils.to_number(value), 0.0)

    @field_validator("net_weight", mode="before")
    @classmethod
    def _coerce_optional_number(cls, value: Any) -> Optional[float]:
        if value is None or value == "":
            return None
        return utils.parse_number(value)

    @field_validator("description", "lot", "presentation", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("is_picking", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return value is True or str(value).strip().lower() == "true"

    @property
    def is_summary_row(self) -> bool:
        return self.pallet_id == 0

    @property
    def computed_net_weight(self) -> float:
        if self.net_weight is not None:
            return self.net_weight
        return self.gross_weight - self.tara_pallet - (self.tara_box * self.quantity_per_pallet)


class ItemGroup(BaseModel):
    """Line items grouped under a destination or a vehicle plate."""

    label: str = ""
    items: list[LineItem] = Field(default_factory=list)


class OperationRecord(BaseModel):
    """A single submitted reception or dispatch, already in canonical shape."""

    id: str = ""
    client_name: str
    kind: OperationKind
    weight_mode: WeightMode
    operation_date: dt.date
    line_items: list[LineItem] = Field(default_factory=list)
    item_groups: list[ItemGroup] = Field(default_factory=list)
    order_type: str = ""
    order_number: str = ""
    created_by: str = ""
    # Pallets released per session by a processing order received the same day.
    processed_output: dict[Session, int] = Field(default_factory=dict)
    # Explicit encoding tag; when unset the pallet_id == 0 sentinel decides.
    summary_form: Optional[bool] = None

    class Config:
        frozen = True

    @field_validator("client_name", "order_type", "order_number", "created_by", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("processed_output", mode="after")
    @classmethod
    def _drop_empty_output(cls, value: dict[Session, int]) -> dict[Session, int]:
        return {session: pallets for session, pallets in value.items() if pallets > 0}

    def all_items(self) -> list[LineItem]:
        """Line items with destination/plate groupings flattened in."""
        items = list(self.line_items)
        for group in self.item_groups:
            items.extend(group.items)
        return items

    @property
    def is_summary_form(self) -> bool:
        if self.summary_form is not None:
            return self.summary_form
        return any(item.is_summary_row for item in self.all_items())


class DailyMovement(BaseModel):
    date: dt.date
    client: str
    session: Optional[Session] = None
    pallets_received: int = Field(default=0, ge=0)
    pallets_dispatched: int = Field(default=0, ge=0)
    net_weight_received: float = 0
    net_weight_dispatched: float = 0


# --- Inventory snapshots ---


class InventoryRow(BaseModel):
    owner: str = ""
    pallet_id: Optional[str] = None
    session: str = ""
    extra: dict[str, Any] = Field(default_factory=dict)

    @field_validator("owner", "session", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("pallet_id", mode="before")
    @classmethod
    def _coerce_pallet_id(cls, value: Any) -> Optional[str]:
        return utils.normalize_pallet_id(value)


class InventorySnapshot(BaseModel):
    """One uploaded daily stock file. The date is also its storage key."""

    date: dt.date
    rows: list[InventoryRow] = Field(default_factory=list)
    uploaded_at: Optional[dt.datetime] = None


# --- Report criteria ---


class BillingCriteria(BaseModel):
    client_name: str
    date_range: DateRange
    kind: Optional[OperationKind] = None
    order_types: list[str] = Field(default_factory=list)
    order_number: Optional[str] = None


class ConsolidatedCriteria(BaseModel):
    client_name: str
    date_range: DateRange
    session: Optional[Session] = None


# --- Report rows ---


class RunningBalance(BaseModel):
    date: dt.date = Field(..., alias="Date")
    client: str = Field(default="", alias="Client")
    session: Optional[Session] = Field(default=None, alias="Session")
    opening_balance: int = Field(default=0, alias="Opening Balance")
    pallets_received: int = Field(default=0, alias="Received")
    pallets_dispatched: int = Field(default=0, alias="Dispatched")
    closing_balance: int = Field(default=0, alias="Closing Balance")

    class Config:
        populate_by_name = True


class BillingReportRow(BaseModel):
    date: dt.date = Field(..., alias="Date")
    received_co: int = Field(default=0, ge=0, alias="Received CO")
    dispatched_co: int = Field(default=0, ge=0, alias="Dispatched CO")
    received_re: int = Field(default=0, ge=0, alias="Received RE")
    dispatched_re: int = Field(default=0, ge=0, alias="Dispatched RE")
    received_se: int = Field(default=0, ge=0, alias="Received SE")
    dispatched_se: int = Field(default=0, ge=0, alias="Dispatched SE")

    class Config:
        populate_by_name = True


class ConsolidatedReportRow(BaseModel):
    date: dt.date = Field(..., alias="Date")
    pallets_received: int = Field(default=0, alias="Received")
    pallets_dispatched: int = Field(default=0, alias="Dispatched")
    inventory_count: int = Field(default=0, alias="Inventory")
    stored_positions: int = Field(default=0, alias="Stored Positions")

    class Config:
        populate_by_name = True


class InventoryPivotRow(BaseModel):
    date: dt.date
    client_data: dict[str, int] = Field(default_factory=dict)


class InventoryPivotReport(BaseModel):
    client_headers: list[str] = Field(default_factory=list)
    rows: list[InventoryPivotRow] = Field(default_factory=list)


class PalletMovement(BaseModel):
    record_id: str
    kind: OperationKind
    date: dt.date
    order_number: str = ""
    created_by: str = ""
    items: list[LineItem] = Field(default_factory=list)


class PalletTraceability(BaseModel):
    pallet_id: int
    client: str
    reception: Optional[PalletMovement] = None
    dispatches: list[PalletMovement] = Field(default_factory=list)

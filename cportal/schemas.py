from datetime import date as Date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from . import settings
from .utils import parse_date


class OrderStatus(str, Enum):
    """Order lifecycle states; anything unrecognized maps to UNKNOWN."""

    RESERVED = "reserved"
    WAITING_PO = "waiting_po"
    INVOICE_SENT = "invoice_sent"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        """Accepts display labels such as 'Invoice Sent' or 'Waiting PO'."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNKNOWN
        key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        if key == "canceled":
            key = "cancelled"
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


# --- Settled classification ---
# Settled orders no longer consume stock. Which table applies is decided by the
# active fulfillment policy.
STANDARD_SETTLED = frozenset(
    {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)
INVOICED_SETTLED = STANDARD_SETTLED | {OrderStatus.INVOICE_SENT}


class EngineConfig(BaseModel):
    """Explicit engine configuration, passed to every engine call."""

    model_config = ConfigDict(frozen=True)

    lead_time_days: int = Field(default=5, ge=0)
    quantity_step_kg: int = Field(default=20, gt=0)
    policy: str = "period_bucket"

    @classmethod
    def from_settings(cls) -> "EngineConfig":
        return cls(
            lead_time_days=settings.LEAD_TIME_DAYS,
            quantity_step_kg=settings.QUANTITY_STEP_KG,
            policy=settings.FULFILLMENT_POLICY,
        )


class StockEntry(BaseModel):
    """A single incoming stock delivery."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    date: Date
    incoming_kg: int = Field(..., ge=0)
    description: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError(f"unrecognized date {value!r}")
        return parsed


class Order(BaseModel):
    """
    A customer order as stored by the data collaborator.

    The engine only reads orders; status changes happen elsewhere.
    """

    id: int | None = None
    timestamp: datetime | None = None
    customer_id: int | None = None
    customer: str
    ordered_by: str
    quantity_kg: int = Field(..., ge=0)
    status: OrderStatus = OrderStatus.RESERVED
    comment: str | None = None
    planned_shipping_date: Date | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        return OrderStatus.parse(value)

    @field_validator("planned_shipping_date", mode="before")
    @classmethod
    def _parse_planned_date(cls, value):
        # Unparseable dates become None so the order is reported unschedulable
        return parse_date(value)

    def is_settled(self, settled: frozenset = STANDARD_SETTLED) -> bool:
        return self.status in settled

    def fcfs_key(self) -> tuple:
        """Sort key: planned date first, then creation time, then id."""
        return (
            self.planned_shipping_date or Date.max,
            self.timestamp.timestamp() if self.timestamp else float("inf"),
            self.id if self.id is not None else 0,
        )


class StockPeriod(BaseModel):
    """
    A window [start_date, end_date) within which the cumulative stock pool is
    constant. An end_date of None means the period is open-ended.
    """

    start_date: Date
    end_date: Date | None = None
    incoming_kg: int = 0
    stock_pool: int
    committed_kg: int = 0
    orders: list[Order] = Field(default_factory=list, exclude=True)

    @computed_field
    @property
    def free_kg(self) -> int:
        # May be negative when the period is over-committed
        return self.stock_pool - self.committed_kg

    def contains(self, day: Date) -> bool:
        if day < self.start_date:
            return False
        return self.end_date is None or day < self.end_date


class AvailabilityResult(BaseModel):
    """Earliest shipping date for a requested quantity, if there is one."""

    date: Date | None = None
    available_kg: int = 0
    message: str | None = None


class FulfillmentResult(BaseModel):
    """Whether an existing order ships on its planned date, and if not, when."""

    order_id: int | None = None
    can_fulfill_on_planned: bool
    earliest_date: Date | None = None
    delay_days: int | None = Field(default=None, ge=0)

    @computed_field
    @property
    def unschedulable(self) -> bool:
        return not self.can_fulfill_on_planned and self.earliest_date is None

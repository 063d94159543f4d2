import logging
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from .availability import find_first_available_date, free_stock_on
from .exceptions import InsufficientStockError, OrderValidationError
from .periods import build_periods
from .schemas import (
    STANDARD_SETTLED,
    EngineConfig,
    Order,
    OrderStatus,
    StockEntry,
)
from .utils import is_weekday, minimum_order_date, parse_date

logger = logging.getLogger(__name__)


class OrderPayload(BaseModel):
    """
    Data contract for a new order as submitted by the portal form.
    The quantity step is read from the validation context ("quantity_step_kg").
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    customer_id: int
    customer: str = Field(..., min_length=1)
    ordered_by: str = Field(..., min_length=1)
    quantity_kg: int
    planned_shipping_date: date | None = None
    comment: str | None = None

    @field_validator("quantity_kg")
    @classmethod
    def _check_quantity(cls, value: int, info: ValidationInfo) -> int:
        step = (info.context or {}).get("quantity_step_kg", 20)
        if value <= 0:
            raise PydanticCustomError(
                "quantity_not_positive", "Quantity must be greater than 0 kg"
            )
        if value % step:
            raise PydanticCustomError(
                "quantity_step",
                "Quantity must be a multiple of {step} kg, got {value} kg",
                {"step": step, "value": value},
            )
        return value

    @field_validator("planned_shipping_date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        if value is None or value == "":
            return None
        parsed = parse_date(value)
        if parsed is None:
            raise PydanticCustomError(
                "date_format",
                "Unrecognized date '{value}', expected YYYY-MM-DD or DD-MM-YYYY",
                {"value": str(value)},
            )
        return parsed


def _first_error(exc: ValidationError) -> OrderValidationError:
    """Turns the first pydantic error into a field-specific rejection."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or "payload"
    if error["type"] == "missing":
        message = f"Missing required field '{field}'"
    else:
        message = error["msg"]
    return OrderValidationError(field, message)


def validate_order(
    payload: dict[str, Any],
    stock_entries: list[StockEntry],
    orders: list[Order],
    today: date,
    config: EngineConfig,
    settled: frozenset = STANDARD_SETTLED,
) -> Order:
    """
    Validates a candidate order against field rules, the shipping calendar and
    current stock. Returns the order to store (status 'reserved', no timestamp).

    Raises:
        OrderValidationError: a field is missing, malformed or not allowed.
        InsufficientStockError: not enough free stock for the quantity.
    """
    try:
        candidate = OrderPayload.model_validate(
            payload, context={"quantity_step_kg": config.quantity_step_kg}
        )
    except ValidationError as e:
        raise _first_error(e) from None

    requested = candidate.quantity_kg
    shipping_date = candidate.planned_shipping_date

    if shipping_date is None:
        periods = build_periods(stock_entries, orders, settled)
        result = find_first_available_date(requested, periods, today, config)
        if result.date is None:
            raise InsufficientStockError(
                result.message, requested_kg=requested, available_kg=result.available_kg
            )
        shipping_date = result.date
    else:
        min_date = minimum_order_date(today, config.lead_time_days)
        if shipping_date < min_date:
            raise OrderValidationError(
                "planned_shipping_date",
                f"Shipping date {shipping_date.isoformat()} is before the earliest "
                f"possible date {min_date.isoformat()}",
                min_date=min_date,
            )
        if not is_weekday(shipping_date):
            raise OrderValidationError(
                "planned_shipping_date",
                f"Shipping date {shipping_date.isoformat()} falls on a weekend",
            )

        available = free_stock_on(shipping_date, stock_entries, orders, settled)
        if requested > available:
            raise InsufficientStockError(
                f"Insufficient stock on {shipping_date.isoformat()}: {requested} kg "
                f"requested, {max(available, 0)} kg available.",
                requested_kg=requested,
                available_kg=max(available, 0),
            )

    logger.info(
        f"✅ Order for {candidate.customer} accepted: {requested} kg on "
        f"{shipping_date.isoformat()}"
    )
    return Order(
        customer_id=candidate.customer_id,
        customer=candidate.customer,
        ordered_by=candidate.ordered_by,
        quantity_kg=requested,
        status=OrderStatus.RESERVED,
        comment=candidate.comment,
        planned_shipping_date=shipping_date,
    )

import logging
from datetime import date
from typing import Iterable

from .schemas import (
    STANDARD_SETTLED,
    AvailabilityResult,
    EngineConfig,
    Order,
    StockEntry,
    StockPeriod,
)
from .utils import first_weekday_between, minimum_order_date

logger = logging.getLogger(__name__)


def shipping_day_in(period: StockPeriod, not_before: date) -> date | None:
    """First weekday inside the period's window that is on or after `not_before`."""
    start = max(period.start_date, not_before)
    return first_weekday_between(start, period.end_date)


def find_first_available_date(
    requested_kg: int,
    periods: list[StockPeriod],
    today: date,
    config: EngineConfig,
) -> AvailabilityResult:
    """
    Walks the period table for the earliest weekday with enough free stock.

    Periods that ended before the minimum order date are ignored. When nothing
    qualifies, the result has no date and reports the largest free quantity
    still on offer so the caller can suggest an alternative.
    """
    if requested_kg <= 0:
        return AvailabilityResult(
            available_kg=0, message="Requested quantity must be greater than 0 kg."
        )

    min_date = minimum_order_date(today, config.lead_time_days)
    best_free = 0

    for period in periods:
        if period.end_date is not None and period.end_date < min_date:
            continue
        best_free = max(best_free, period.free_kg)
        if period.free_kg < requested_kg:
            continue

        day = shipping_day_in(period, min_date)
        if day is None:
            # The window closes before a usable weekday; try the next period
            continue

        logger.info(
            f"✅ {requested_kg} kg available from {day.isoformat()} "
            f"(period starting {period.start_date.isoformat()}, free {period.free_kg} kg)"
        )
        return AvailabilityResult(date=day, available_kg=period.free_kg)

    logger.info(
        f"⚠️ No date found for {requested_kg} kg; at most {best_free} kg available."
    )
    return AvailabilityResult(
        available_kg=best_free,
        message=(
            f"Insufficient stock: {requested_kg} kg requested, "
            f"at most {best_free} kg available."
        ),
    )


def free_stock_on(
    day: date,
    stock_entries: Iterable[StockEntry],
    orders: Iterable[Order],
    settled: frozenset = STANDARD_SETTLED,
) -> int:
    """
    Free stock on an exact date, without period bucketing: everything delivered
    on or before `day` minus every pending order planned on or before `day`.
    """
    incoming = sum(e.incoming_kg for e in stock_entries if e.date <= day)
    committed = sum(
        o.quantity_kg
        for o in orders
        if not o.is_settled(settled)
        and o.planned_shipping_date is not None
        and o.planned_shipping_date <= day
    )
    return incoming - committed

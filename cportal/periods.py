import logging
from bisect import bisect_right
from datetime import date
from typing import Iterable

import pandas as pd

from .schemas import STANDARD_SETTLED, Order, StockEntry, StockPeriod

logger = logging.getLogger(__name__)


def _delivery_points(stock_entries: Iterable[StockEntry]) -> pd.DataFrame:
    """
    Collapses the deliveries into one row per date, sorted ascending, with the
    running stock pool alongside.
    """
    df = pd.DataFrame(
        [{"date": e.date, "incoming_kg": e.incoming_kg} for e in stock_entries],
        columns=["date", "incoming_kg"],
    )
    points = df.groupby("date", sort=True)["incoming_kg"].sum().reset_index()
    points["stock_pool"] = points["incoming_kg"].cumsum()
    return points


def find_period(periods: list[StockPeriod], day: date) -> int | None:
    """Index of the period containing `day`, or None if it predates them all."""
    starts = [p.start_date for p in periods]
    index = bisect_right(starts, day) - 1
    return index if index >= 0 else None


def build_periods(
    stock_entries: Iterable[StockEntry],
    orders: Iterable[Order],
    settled: frozenset = STANDARD_SETTLED,
) -> list[StockPeriod]:
    """
    Partitions the stock timeline into contiguous periods, one per delivery date.

    Each period's stock pool is the cumulative incoming stock up to and
    including its start; committed_kg sums the pending orders planned inside
    [start, end). Orders with no planned date, or planned before the first
    delivery, belong to no period.
    """
    points = _delivery_points(stock_entries)
    if points.empty:
        return []

    starts = points["date"].tolist()
    ends = starts[1:] + [None]
    periods = [
        StockPeriod(
            start_date=start,
            end_date=end,
            incoming_kg=int(incoming),
            stock_pool=int(pool),
        )
        for start, end, incoming, pool in zip(
            starts, ends, points["incoming_kg"], points["stock_pool"]
        )
    ]

    pending = sorted(
        (
            o
            for o in orders
            if not o.is_settled(settled) and o.planned_shipping_date is not None
        ),
        key=Order.fcfs_key,
    )
    for order in pending:
        index = find_period(periods, order.planned_shipping_date)
        if index is None:
            continue
        periods[index].committed_kg += order.quantity_kg
        periods[index].orders.append(order)

    logger.debug(
        f"Built {len(periods)} stock periods from {len(starts)} delivery dates "
        f"and {len(pending)} scheduled pending orders."
    )
    return periods


def timeline_frame(periods: list[StockPeriod]) -> pd.DataFrame:
    """Tabular view of the period table, for display and export."""
    columns = [
        "start_date",
        "end_date",
        "incoming_kg",
        "stock_pool",
        "committed_kg",
        "free_kg",
        "orders",
    ]
    rows = [
        {**p.model_dump(), "orders": len(p.orders)} for p in periods
    ]
    return pd.DataFrame(rows, columns=columns)

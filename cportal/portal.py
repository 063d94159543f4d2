"""
Order portal facade: the three operations the request layer calls.

Usage:
    portal = OrderPortal(SupabaseDataSource())
    portal.check_availability(500)   # {"date": "2026-02-02", "available_kg": 780, ...}
    portal.create_order({...})       # {"success": True, "order": {...}}
    portal.get_dashboard()

Every call re-reads stock and orders from the data source and recomputes from
scratch. Two concurrent create_order calls can both see the same free stock
and oversell a period; the store must re-check availability inside the
transaction that inserts the order.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from .availability import find_first_available_date
from .data_handler import DataSource
from .exceptions import OrderValidationError
from .intake import validate_order
from .periods import build_periods, find_period
from .policies import get_policy
from .schemas import EngineConfig
from .utils import minimum_order_date

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderPortal:
    def __init__(
        self,
        data_source: DataSource,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.data_source = data_source
        self.config = config or EngineConfig.from_settings()
        self.clock = clock or _utc_now
        self.policy = get_policy(self.config)

    def get_dashboard(self) -> dict[str, Any]:
        """Stock timeline plus every order with its fulfillment outlook."""
        today = self.clock().date()
        stock_entries = self.data_source.list_stock_entries()
        orders = self.data_source.list_orders()
        settled = self.policy.settled_statuses

        periods = build_periods(stock_entries, orders, settled)
        results = self.policy.run(stock_entries, orders, today)
        min_date = minimum_order_date(today, self.config.lead_time_days)

        current = find_period(periods, min_date)
        pending_kg = sum(
            o.quantity_kg for o in orders if not o.is_settled(settled)
        )

        rows = sorted(zip(orders, results), key=lambda pair: pair[0].fcfs_key())
        return {
            "generated_on": today.isoformat(),
            "policy": self.policy.name,
            "minimum_order_date": min_date.isoformat(),
            "summary": {
                "total_incoming_kg": sum(e.incoming_kg for e in stock_entries),
                "pending_kg": pending_kg,
                "free_now_kg": periods[current].free_kg if current is not None else 0,
            },
            "stock_timeline": [p.model_dump(mode="json") for p in periods],
            "orders_with_fulfillment": [
                {
                    **order.model_dump(mode="json"),
                    "fulfillment": result.model_dump(mode="json"),
                }
                for order, result in rows
            ],
        }

    def check_availability(self, requested_kg: int) -> dict[str, Any]:
        today = self.clock().date()
        periods = build_periods(
            self.data_source.list_stock_entries(),
            self.data_source.list_orders(),
            self.policy.settled_statuses,
        )
        result = find_first_available_date(requested_kg, periods, today, self.config)
        return result.model_dump(mode="json")

    def create_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Validates and stores a new order. Rejections come back as
        {"success": False, ...}; data-access failures propagate.
        """
        now = self.clock()
        try:
            order = validate_order(
                payload,
                self.data_source.list_stock_entries(),
                self.data_source.list_orders(),
                now.date(),
                self.config,
                self.policy.settled_statuses,
            )
        except OrderValidationError as e:
            logger.warning(f"⚠️ Order rejected ({e.code}, {e.field}): {e.message}")
            return {
                "success": False,
                "error": e.message,
                "field": e.field,
                "code": e.code,
                "data": e.as_dict()["data"],
            }

        stored = self.data_source.append_order(order.model_copy(update={"timestamp": now}))
        return {"success": True, "order": stored.model_dump(mode="json")}

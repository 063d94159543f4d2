import logging
from abc import ABC, abstractmethod
from datetime import date

from .schemas import (
    STANDARD_SETTLED,
    EngineConfig,
    FulfillmentResult,
    Order,
    StockEntry,
)
from .utils import minimum_order_date

logger = logging.getLogger(__name__)


class FulfillmentPolicy(ABC):
    """
    Abstract base class for stock consumption policies.
    Partitions the orders (settled -> unscheduled -> pending) and lets the
    concrete policy decide the pending ones.
    """

    name: str = ""
    settled_statuses: frozenset = STANDARD_SETTLED

    def __init__(self, config: EngineConfig):
        self.config = config

    def run(
        self,
        stock_entries: list[StockEntry],
        orders: list[Order],
        today: date,
    ) -> list[FulfillmentResult]:
        """
        Returns one FulfillmentResult per order, in the same order as `orders`.
        """
        results: list[FulfillmentResult | None] = [None] * len(orders)
        pending_idx = []

        for i, order in enumerate(orders):
            if order.is_settled(self.settled_statuses):
                results[i] = self.on_time(order)
            elif order.planned_shipping_date is None:
                results[i] = self.unschedulable(order)
            else:
                pending_idx.append(i)

        pending = [orders[i] for i in pending_idx]
        decided = self.evaluate(stock_entries, pending, today)
        for i, result in zip(pending_idx, decided):
            results[i] = result

        delayed = sum(1 for r in decided if not r.can_fulfill_on_planned)
        logger.info(
            f"Policy '{self.name}': {len(orders)} orders, {len(pending)} pending, "
            f"{delayed} not shippable on their planned date."
        )
        return results

    @abstractmethod
    def evaluate(
        self,
        stock_entries: list[StockEntry],
        pending: list[Order],
        today: date,
    ) -> list[FulfillmentResult]:
        """
        Decides every pending, dated order. Must return results aligned with
        `pending`.
        """
        pass

    def min_date(self, today: date) -> date:
        return minimum_order_date(today, self.config.lead_time_days)

    @staticmethod
    def on_time(order: Order) -> FulfillmentResult:
        # No alternative date: the order keeps its planned date
        return FulfillmentResult(
            order_id=order.id,
            can_fulfill_on_planned=True,
            delay_days=0,
        )

    @staticmethod
    def delayed(order: Order, earliest: date) -> FulfillmentResult:
        delay = (earliest - order.planned_shipping_date).days
        return FulfillmentResult(
            order_id=order.id,
            can_fulfill_on_planned=False,
            earliest_date=earliest,
            delay_days=max(0, delay),
        )

    @staticmethod
    def unschedulable(order: Order) -> FulfillmentResult:
        return FulfillmentResult(order_id=order.id, can_fulfill_on_planned=False)

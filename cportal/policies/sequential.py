import logging
from datetime import date

import pandas as pd

from cportal.policy import FulfillmentPolicy
from cportal.schemas import (
    INVOICED_SETTLED,
    FulfillmentResult,
    Order,
    StockEntry,
)
from cportal.utils import first_weekday_between

logger = logging.getLogger(__name__)


class SequentialPolicy(FulfillmentPolicy):
    """
    Strict first-come-first-served consumption.

    Orders are walked by planned date (then creation time). Each one claims
    stock from the cumulative deliveries available on its date, after the
    claims of every earlier order. An order that does not fit moves to the
    first delivery date where it does. Invoiced orders count as settled.
    """

    name = "sequential"
    settled_statuses = INVOICED_SETTLED

    def evaluate(
        self,
        stock_entries: list[StockEntry],
        pending: list[Order],
        today: date,
    ) -> list[FulfillmentResult]:
        deliveries = (
            pd.DataFrame(
                [{"date": e.date, "incoming_kg": e.incoming_kg} for e in stock_entries],
                columns=["date", "incoming_kg"],
            )
            .groupby("date", sort=True)["incoming_kg"]
            .sum()
            .cumsum()
        )
        # (delivery date, cumulative kg delivered by then)
        cumulative = [(d, int(kg)) for d, kg in deliveries.items()]

        min_date = self.min_date(today)
        claimed = 0
        decided: dict[int, FulfillmentResult] = {}

        for position, order in sorted(
            enumerate(pending), key=lambda item: item[1].fcfs_key()
        ):
            planned = order.planned_shipping_date
            delivered = max((kg for d, kg in cumulative if d <= planned), default=0)

            if delivered - claimed >= order.quantity_kg:
                claimed += order.quantity_kg
                decided[position] = self.on_time(order)
                continue

            earliest = None
            for delivery_date, kg in cumulative:
                if delivery_date <= planned or kg - claimed < order.quantity_kg:
                    continue
                earliest = first_weekday_between(max(delivery_date, min_date))
                break

            if earliest is None:
                logger.warning(
                    f"  > Order {order.id} ({order.quantity_kg} kg) exceeds all "
                    f"remaining stock; unschedulable."
                )
                decided[position] = self.unschedulable(order)
            else:
                claimed += order.quantity_kg
                decided[position] = self.delayed(order, earliest)

        return [decided[i] for i in range(len(pending))]

import logging
from datetime import date

from cportal.availability import shipping_day_in
from cportal.periods import build_periods, find_period
from cportal.policy import FulfillmentPolicy
from cportal.schemas import (
    STANDARD_SETTLED,
    FulfillmentResult,
    Order,
    StockEntry,
)

logger = logging.getLogger(__name__)


class PeriodBucketPolicy(FulfillmentPolicy):
    """
    Judges each order against the free stock of the period its planned date
    falls in. Free stock already nets every pending order in that period,
    this one included, so it is not subtracted a second time.
    """

    name = "period_bucket"
    settled_statuses = STANDARD_SETTLED

    def evaluate(
        self,
        stock_entries: list[StockEntry],
        pending: list[Order],
        today: date,
    ) -> list[FulfillmentResult]:
        periods = build_periods(stock_entries, pending, self.settled_statuses)
        min_date = self.min_date(today)
        results = []

        for order in pending:
            index = find_period(periods, order.planned_shipping_date)

            if index is not None and periods[index].free_kg >= 0:
                results.append(self.on_time(order))
                continue

            # Over-committed (or before the first delivery): look further ahead
            candidates = periods if index is None else periods[index + 1:]
            not_before = max(order.planned_shipping_date, min_date)
            earliest = None
            for period in candidates:
                if period.free_kg < order.quantity_kg:
                    continue
                earliest = shipping_day_in(period, not_before)
                if earliest is not None:
                    break

            if earliest is None:
                logger.warning(
                    f"  > Order {order.id} ({order.quantity_kg} kg on "
                    f"{order.planned_shipping_date}) cannot be scheduled."
                )
                results.append(self.unschedulable(order))
            else:
                results.append(self.delayed(order, earliest))

        return results

import argparse
import json
import logging

import pandas as pd

from cportal.data_handler import SupabaseDataSource
from cportal.exceptions import DataAccessError
from cportal.logger import setup_logger
from cportal.portal import OrderPortal

logger = logging.getLogger("cportal")


def run_process(requested_kg: int | None = None):
    """Prints the stock timeline and order outlook for the configured store."""
    setup_logger("cportal")
    logger.info("--- Loading Portal Dashboard ---")

    try:
        portal = OrderPortal(SupabaseDataSource())
        dashboard = portal.get_dashboard()
    except DataAccessError as e:
        logger.error(f"❌ {e.message}")
        return

    logger.info(
        f"Policy: {dashboard['policy']} | "
        f"Earliest shipping date: {dashboard['minimum_order_date']}"
    )

    logger.info("\n--- Stock Timeline ---")
    timeline = pd.DataFrame(dashboard["stock_timeline"])
    logger.info(timeline.to_string() if not timeline.empty else "No stock entries.")

    logger.info("\n--- Orders ---")
    for row in dashboard["orders_with_fulfillment"]:
        outlook = row["fulfillment"]
        if outlook["can_fulfill_on_planned"]:
            state = "on time"
        elif outlook["unschedulable"]:
            state = "UNSCHEDULABLE"
        else:
            state = f"delayed to {outlook['earliest_date']} (+{outlook['delay_days']}d)"
        logger.info(
            f"{row['planned_shipping_date'] or '—':>10}  {row['quantity_kg']:>6} kg  "
            f"{row['customer']:<20} {state}"
        )

    if requested_kg is not None:
        logger.info(f"\n--- Availability for {requested_kg} kg ---")
        logger.info(json.dumps(portal.check_availability(requested_kg), indent=2))

    logger.info("\n--- Process Finished Successfully ---")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Show the portal stock dashboard.")
    parser.add_argument("--kg", type=int, help="also check availability for this quantity")
    args = parser.parse_args()
    run_process(args.kg)

"""
Shared fixtures: the portal's seed data (five deliveries, seven orders) and a
fixed "today" of Monday 2026-01-26, whose minimum order date is 2026-02-02.
"""
from datetime import date, datetime, timezone

import pytest

from cportal.data_handler import InMemoryDataSource
from cportal.portal import OrderPortal
from cportal.schemas import EngineConfig, Order, StockEntry

TODAY = date(2026, 1, 26)
NOW = datetime(2026, 1, 26, 9, 30, tzinfo=timezone.utc)

STOCK_ROWS = [
    ("2026-01-01", 6000, "Initial stock"),
    ("2026-03-16", 2000, "First forecast stock update"),
    ("2026-04-16", 4800, "Additional stock for Impacd"),
    ("2026-06-01", 960, "Second forecast stock update"),
    ("2026-09-01", 4800, "Third forecast stock update"),
]

ORDER_ROWS = [
    ("2026-01-21 15:36:43", "CEAD BV", "Maarten 4", 480, "Invoice Sent", "2026-01-28"),
    ("2026-02-02 10:55:17", "HAVOC AI", "Hugo", 1920, "Invoice Sent", "2026-02-13"),
    ("2026-02-03 16:35:17", "CEAD BV", "Bob", 480, "Waiting PO", "2026-02-25"),
    ("2026-02-04 15:04:36", "Culmar", "Maarten L", 900, "Waiting PO", "2026-02-08"),
    ("2026-02-04 15:04:36", "Impacd", "Maarten 4", 1440, "Waiting PO", "2026-02-11"),
    ("2026-02-04 15:08:12", "Impacd", "Maarten 4", 4800, "Waiting PO", "2026-03-16"),
    ("2026-02-04 15:08:12", "Impacd", "Maarten 4", 6360, "Waiting PO", "2026-05-16"),
]


def make_order(quantity_kg, planned, status="reserved", order_id=None, **extra):
    """Helper: a minimal order for ad-hoc scenarios."""
    return Order(
        id=order_id,
        customer=extra.pop("customer", "Test BV"),
        ordered_by=extra.pop("ordered_by", "Tester"),
        quantity_kg=quantity_kg,
        status=status,
        planned_shipping_date=planned,
        **extra,
    )


@pytest.fixture
def config():
    return EngineConfig(lead_time_days=5, quantity_step_kg=20, policy="period_bucket")


@pytest.fixture
def stock_entries():
    return [
        StockEntry(id=i, date=d, incoming_kg=kg, description=desc)
        for i, (d, kg, desc) in enumerate(STOCK_ROWS, start=1)
    ]


@pytest.fixture
def orders():
    return [
        Order(
            id=i,
            timestamp=ts,
            customer_id=1,
            customer=customer,
            ordered_by=by,
            quantity_kg=kg,
            status=status,
            planned_shipping_date=planned,
        )
        for i, (ts, customer, by, kg, status, planned) in enumerate(ORDER_ROWS, start=1)
    ]


@pytest.fixture
def data_source(stock_entries, orders):
    return InMemoryDataSource(stock_entries, orders)


@pytest.fixture
def portal(data_source, config):
    return OrderPortal(data_source, config=config, clock=lambda: NOW)

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

from . import settings
from .exceptions import DataAccessError
from .parsers import parse_order_rows, parse_stock_rows
from .schemas import Order, StockEntry

logger = logging.getLogger(__name__)


class DataSource(ABC):
    """The data-access collaborator the portal reads from and appends to."""

    @abstractmethod
    def list_stock_entries(self) -> list[StockEntry]:
        pass

    @abstractmethod
    def list_orders(self) -> list[Order]:
        pass

    @abstractmethod
    def append_order(self, order: Order) -> Order:
        """Stores a new order and returns it as persisted (id, timestamp)."""
        pass


class SupabaseDataSource(DataSource):
    """
    Reads and writes the stock_levels / orders tables through the Supabase
    REST (PostgREST) API. Failures surface as DataAccessError; no retries.
    """

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        stock_table: str | None = None,
        orders_table: str | None = None,
        timeout: int | None = None,
    ):
        self.url = (url or settings.SUPABASE_URL or "").rstrip("/")
        self.key = key or settings.SUPABASE_KEY
        self.stock_table = stock_table or settings.STOCK_TABLE
        self.orders_table = orders_table or settings.ORDERS_TABLE
        self.timeout = timeout or settings.REQUEST_TIMEOUT

        if not self.url or not self.key:
            raise DataAccessError("SUPABASE_URL and SUPABASE_KEY must be set.")

    @property
    def headers(self) -> dict[str, str]:
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
        }

    def _table_url(self, table: str) -> str:
        return f"{self.url}/rest/v1/{table}"

    def _get(self, table: str, order_by: str) -> list[dict[str, Any]]:
        try:
            response = requests.get(
                self._table_url(table),
                headers=self.headers,
                params={"select": "*", "order": order_by},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Error reading '{table}': {e}")
            raise DataAccessError(f"Could not read '{table}': {e}", table=table) from e

    def list_stock_entries(self) -> list[StockEntry]:
        rows = self._get(self.stock_table, "date.asc")
        entries = parse_stock_rows(rows)
        logger.info(f"Loaded {len(entries)} of {len(rows)} stock rows.")
        return entries

    def list_orders(self) -> list[Order]:
        rows = self._get(self.orders_table, "planned_shipping_date.asc")
        orders = parse_order_rows(rows)
        logger.info(f"Loaded {len(orders)} of {len(rows)} order rows.")
        return orders

    def append_order(self, order: Order) -> Order:
        payload = order.model_dump(mode="json", exclude={"id"}, exclude_none=True)
        try:
            response = requests.post(
                self._table_url(self.orders_table),
                headers={**self.headers, "Prefer": "return=representation"},
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            rows = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Error writing order: {e}")
            raise DataAccessError(
                f"Could not store order: {e}", table=self.orders_table
            ) from e

        stored = parse_order_rows(rows)
        if not stored:
            raise DataAccessError(
                "Order insert returned no row.", table=self.orders_table
            )
        logger.info(f"✅ Order {stored[0].id} stored.")
        return stored[0]


class InMemoryDataSource(DataSource):
    """Keeps stock and orders in lists; ids are assigned on append."""

    def __init__(
        self,
        stock_entries: list[StockEntry] | None = None,
        orders: list[Order] | None = None,
    ):
        self.stock_entries = list(stock_entries or [])
        self.orders = list(orders or [])

    def list_stock_entries(self) -> list[StockEntry]:
        return list(self.stock_entries)

    def list_orders(self) -> list[Order]:
        return list(self.orders)

    def append_order(self, order: Order) -> Order:
        next_id = max((o.id or 0 for o in self.orders), default=0) + 1
        stored = order.model_copy(update={"id": next_id})
        self.orders.append(stored)
        return stored

import logging
from typing import Any, Iterable

import pandas as pd
from pydantic import ValidationError

from .schemas import Order, StockEntry

logger = logging.getLogger(__name__)


def _clean_records(rows: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Normalizes raw rows (API JSON or spreadsheet exports) into plain dicts.
    - Lower-cases and snake-cases the column names.
    - Turns NaN / empty strings into None so optional fields validate.
    """
    df = pd.DataFrame(list(rows))
    if df.empty:
        return []

    df.columns = [
        str(col).strip().lower().replace(" ", "_") for col in df.columns
    ]
    df = df.astype(object).where(pd.notna(df), None)
    records = df.to_dict("records")
    return [
        {str(k): (None if v == "" else v) for k, v in rec.items()} for rec in records
    ]


def parse_stock_rows(rows: Iterable[dict[str, Any]]) -> list[StockEntry]:
    """
    Maps raw stock rows to StockEntry models.

    A row with a missing or unrecognized date is skipped with a warning, so one
    bad row never aborts the rest of the listing.
    """
    entries = []
    for index, record in enumerate(_clean_records(rows)):
        try:
            entries.append(StockEntry.model_validate(record))
        except ValidationError as e:
            logger.warning(
                f"⚠️ Skipping stock row {index} ({record.get('date')!r}): "
                f"{e.error_count()} invalid field(s)"
            )
    return entries


def parse_order_rows(rows: Iterable[dict[str, Any]]) -> list[Order]:
    """Maps raw order rows to Order models, skipping rows that do not validate."""
    orders = []
    for index, record in enumerate(_clean_records(rows)):
        try:
            orders.append(Order.model_validate(record))
        except ValidationError as e:
            logger.warning(
                f"⚠️ Skipping order row {index} (id={record.get('id')!r}): "
                f"{e.error_count()} invalid field(s)"
            )
    return orders

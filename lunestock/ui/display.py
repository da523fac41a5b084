"""Streamlit rendering helpers for the LuneStock screens.

Formatting helpers are plain functions so they can be tested without a
running Streamlit app. Render functions take `st` as a parameter for the same
reason.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Sequence

import streamlit as st

from lunestock.domains.inventory.models import (
    DashboardStats,
    InventoryRow,
    ProductWithVariants,
    Sale,
    SalesPoint,
    StockPoint,
)
from lunestock.utils.logger import get_logger

logger = get_logger("ui")

CURRENCY = "S/"

_MONTHS_ES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def format_money(amount: Decimal | float | int) -> str:
    """`79.8` -> `S/ 79.80`."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{CURRENCY} {value:,.2f}"


def format_sale_date(moment: datetime) -> str:
    """`2023-04-10T15:30` -> `10 de abril, 2023 - 15:30`."""
    return f"{moment.day} de {_MONTHS_ES[moment.month - 1]}, {moment.year} - {moment:%H:%M}"


def stock_status(stock: int, threshold: int = 5) -> str:
    if stock == 0:
        return "Out of stock"
    if stock < threshold:
        return "Low stock"
    return "In stock"


def inventory_table(rows: Sequence[InventoryRow], threshold: int = 5) -> list[dict[str, Any]]:
    return [
        {
            "Product": r.product_name,
            "Size": r.size,
            "Color": r.color,
            "Stock": r.stock,
            "Status": stock_status(r.stock, threshold),
        }
        for r in rows
    ]


def sales_table(sales: Sequence[Sale]) -> list[dict[str, Any]]:
    return [
        {
            "Date": format_sale_date(s.date),
            "Product": s.product_name,
            "Size": s.size,
            "Color": s.color,
            "Quantity": s.quantity,
            "Total": format_money(s.total),
        }
        for s in sales
    ]


def products_table(items: Sequence[ProductWithVariants]) -> list[dict[str, Any]]:
    return [
        {
            "Name": i.product.name,
            "Description": i.product.description or "No description",
            "Variants": len(i.variants),
            "Total stock": i.total_stock,
        }
        for i in items
    ]


def series_chart_data(points: Sequence[SalesPoint | StockPoint]) -> dict[str, list[Any]]:
    """Column-oriented data for st.bar_chart."""
    if points and isinstance(points[0], StockPoint):
        return {"name": [p.name for p in points], "stock": [p.stock for p in points]}
    return {"day": [p.label for p in points], "sales": [p.value for p in points]}


def render_stats(stats: DashboardStats, st=st) -> None:
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Products", stats.total_products)
    c2.metric("Total stock", stats.total_stock)
    c3.metric("Recent sales", stats.recent_sales)
    c4.metric("Low stock", stats.low_stock_items)
    c5.metric("Revenue", format_money(stats.total_revenue))


def render_bar_chart(points: Sequence[SalesPoint | StockPoint], st=st) -> None:
    if not points:
        st.caption("No data yet.")
        return
    data = series_chart_data(points)
    x, y = list(data)
    st.bar_chart(data, x=x, y=y)


def notify_error(action: str, err: Exception, st=st) -> None:
    """Show a failed action to the user; screen state is left as it was."""
    logger.warning("%s failed: %s", action, err)
    st.error(f"{action} failed: {err}")

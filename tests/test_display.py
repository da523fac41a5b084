"""
Tests for display helpers: money and date formatting, tables, Streamlit calls.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

from lunestock.domains.inventory.models import (
    DashboardStats,
    InventoryRow,
    Product,
    ProductVariant,
    ProductWithVariants,
    Sale,
    SalesPoint,
    StockPoint,
)
from lunestock.ui.display import (
    format_money,
    format_sale_date,
    inventory_table,
    notify_error,
    products_table,
    render_bar_chart,
    render_stats,
    sales_table,
    series_chart_data,
    stock_status,
)


def test_format_money() -> None:
    assert format_money(Decimal("79.8")) == "S/ 79.80"
    assert format_money(1234.5) == "S/ 1,234.50"
    assert format_money(0) == "S/ 0.00"


def test_format_sale_date() -> None:
    assert format_sale_date(datetime(2023, 4, 10, 15, 30)) == "10 de abril, 2023 - 15:30"


def test_stock_status() -> None:
    assert stock_status(0) == "Out of stock"
    assert stock_status(4) == "Low stock"
    assert stock_status(5) == "In stock"


def test_tables() -> None:
    """Rows are flattened into the columns each screen shows."""
    variant = ProductVariant(id="v1", product_id="p1", size="M", color="Negro", stock=2)
    inv = inventory_table([InventoryRow(variant=variant, product_name="Polo")])
    assert inv == [{"Product": "Polo", "Size": "M", "Color": "Negro", "Stock": 2, "Status": "Low stock"}]

    sale = Sale(
        id="s1",
        product_name="Polo",
        size="M",
        color="Negro",
        quantity=2,
        price=Decimal("39.9"),
        total=Decimal("79.8"),
        date=datetime(2023, 4, 10, 15, 30, tzinfo=timezone.utc),
    )
    row = sales_table([sale])[0]
    assert row["Total"] == "S/ 79.80"
    assert row["Date"] == "10 de abril, 2023 - 15:30"

    products = products_table([ProductWithVariants(product=Product(id="p1", name="Polo"), variants=[variant])])
    assert products == [{"Name": "Polo", "Description": "No description", "Variants": 1, "Total stock": 2}]


def test_series_chart_data() -> None:
    sales = [SalesPoint(label="Mon", day=date(2024, 5, 6), value=3)]
    assert series_chart_data(sales) == {"day": ["Mon"], "sales": [3]}
    assert series_chart_data([StockPoint(name="Polo", stock=9)]) == {"name": ["Polo"], "stock": [9]}


def test_render_stats() -> None:
    """Five metrics, revenue formatted as money."""
    st = MagicMock()
    cols = [MagicMock() for _ in range(5)]
    st.columns.return_value = cols
    render_stats(DashboardStats(Decimal("79.8"), 12, 1, 2, 3), st=st)
    st.columns.assert_called_once_with(5)
    cols[4].metric.assert_called_once_with("Revenue", "S/ 79.80")
    cols[0].metric.assert_called_once_with("Products", 3)


def test_render_bar_chart() -> None:
    st = MagicMock()
    render_bar_chart([], st=st)
    st.caption.assert_called_once()
    st.bar_chart.assert_not_called()

    render_bar_chart([StockPoint(name="Polo", stock=9)], st=st)
    st.bar_chart.assert_called_once_with({"name": ["Polo"], "stock": [9]}, x="name", y="stock")


def test_notify_error() -> None:
    st = MagicMock()
    notify_error("Registering sale", RuntimeError("timeout"), st=st)
    st.error.assert_called_once_with("Registering sale failed: timeout")

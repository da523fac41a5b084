"""Inventory domain: records, dashboard aggregates, stock and sale rules."""

from lunestock.domains.inventory.dashboard import compute_dashboard_stats, weekly_sales_series
from lunestock.domains.inventory.errors import (
    InsufficientStockError,
    RecordDecodeError,
    ValidationError,
)
from lunestock.domains.inventory.sales import edit_sale, register_sale
from lunestock.domains.inventory.stock import StockOperation, adjust_stock

__all__ = [
    "InsufficientStockError",
    "RecordDecodeError",
    "StockOperation",
    "ValidationError",
    "adjust_stock",
    "compute_dashboard_stats",
    "edit_sale",
    "register_sale",
    "weekly_sales_series",
]

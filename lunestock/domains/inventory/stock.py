"""
Stock arithmetic and inventory views.

`adjust_stock` is the only place a manual stock change is computed. Callers
check that the amount is positive before calling it.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Sequence

from lunestock.domains.inventory.dashboard import LOW_STOCK_THRESHOLD
from lunestock.domains.inventory.errors import ValidationError
from lunestock.domains.inventory.models import (
    InventoryRow,
    Product,
    ProductVariant,
    StockPoint,
)

ALL = "_all"


class StockOperation(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"

    @classmethod
    def parse(cls, value: "StockOperation | str") -> "StockOperation":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown stock operation: {value!r}") from None


def adjust_stock(current: int, operation: StockOperation | str, amount: int) -> int:
    """
    Return the stock after adding or removing `amount` units.

    Subtracting more than is on hand gives 0, never a negative value.
    """
    op = StockOperation.parse(operation)
    if op is StockOperation.ADD:
        return current + amount
    return max(0, current - amount)


def is_low_stock(variant: ProductVariant, threshold: int = LOW_STOCK_THRESHOLD) -> bool:
    return variant.stock < threshold


def inventory_rows(
    products: Iterable[Product], variants: Iterable[ProductVariant]
) -> list[InventoryRow]:
    """Join variants with their product names. Orphan variants are dropped."""
    names = {p.id: p.name for p in products}
    return [
        InventoryRow(variant=v, product_name=names[v.product_id])
        for v in variants
        if v.product_id in names
    ]


def _matches(value: str, wanted: Optional[str]) -> bool:
    return wanted is None or wanted == ALL or value == wanted


def filter_inventory(
    rows: Iterable[InventoryRow],
    search: str = "",
    product: Optional[str] = None,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> list[InventoryRow]:
    """
    Filter inventory rows the way the inventory screen does.

    `search` is a case-insensitive substring of the product name. The other
    filters are exact matches; None or "_all" disables a filter.
    """
    term = (search or "").strip().lower()
    out = []
    for row in rows:
        if term and term not in row.product_name.lower():
            continue
        if not (_matches(row.product_name, product) and _matches(row.size, size) and _matches(row.color, color)):
            continue
        out.append(row)
    return out


def _unique(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for v in values:
        seen.setdefault(v, None)
    return list(seen)


def filter_options(rows: Sequence[InventoryRow]) -> dict[str, list[str]]:
    """Distinct product names, sizes and colors, in first-seen order."""
    return {
        "products": _unique(r.product_name for r in rows),
        "sizes": _unique(r.size for r in rows),
        "colors": _unique(r.color for r in rows),
    }


def stock_by_product(rows: Sequence[InventoryRow]) -> list[StockPoint]:
    """Total stock per product name, for the inventory chart."""
    totals: dict[str, int] = {}
    for r in rows:
        totals[r.product_name] = totals.get(r.product_name, 0) + r.stock
    return [StockPoint(name=name, stock=stock) for name, stock in totals.items()]

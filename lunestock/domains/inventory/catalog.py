"""Products, variants and reference data (sizes, colors)."""

from __future__ import annotations

import re
from typing import Iterable

from lunestock.domains.inventory.errors import ValidationError
from lunestock.domains.inventory.models import Product, ProductVariant, ProductWithVariants

_HEX_RE = re.compile(r"^#?([0-9A-Fa-f]{6}|[0-9A-Fa-f]{3})$")

DEFAULT_SIZES: tuple[str, ...] = ("S", "M", "L", "XL")

DEFAULT_COLORS: tuple[tuple[str, str], ...] = (
    ("Negro", "#000000"),
    ("Blanco", "#FFFFFF"),
    ("Azul", "#0000FF"),
    ("Rojo", "#FF0000"),
    ("Cream", "#FFFDD0"),
    ("Dark Green", "#006400"),
    ("Brown", "#A52A2A"),
)


def group_products(
    products: Iterable[Product], variants: Iterable[ProductVariant]
) -> list[ProductWithVariants]:
    """Attach each product's variants, keeping the product order."""
    by_product: dict[str, list[ProductVariant]] = {}
    for v in variants:
        by_product.setdefault(v.product_id, []).append(v)
    return [ProductWithVariants(product=p, variants=by_product.get(p.id, [])) for p in products]


def search_products(items: Iterable[ProductWithVariants], term: str) -> list[ProductWithVariants]:
    needle = (term or "").strip().lower()
    return [i for i in items if needle in i.product.name.lower()]


def validate_product_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Product name is required")
    return cleaned


def validate_reference_name(name: str | None, kind: str = "name") -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(f"{kind.capitalize()} is required")
    return cleaned


def normalize_hex(value: str | None) -> str:
    """Return `#RRGGBB` / `#RGB` upper-cased; a missing leading '#' is added."""
    m = _HEX_RE.match((value or "").strip())
    if not m:
        raise ValidationError(f"Invalid color hex: {value!r}")
    return "#" + m.group(1).upper()


def validate_initial_stock(stock: object) -> int:
    if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
        raise ValidationError(f"Initial stock must be a whole number >= 0, got {stock!r}")
    return stock

"""
Sale registration, edit and stock reconciliation.

These functions only compute. Persisting a registration (sale row plus stock
decrement) is the job of SalesService, which treats the two writes as one
unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from lunestock.domains.inventory.errors import InsufficientStockError, ValidationError
from lunestock.domains.inventory.models import Product, ProductVariant, Sale


@dataclass(frozen=True)
class SaleRegistration:
    """The new (unsaved) sale and the variant as it must look afterwards."""

    sale: Sale
    variant: ProductVariant


@dataclass(frozen=True)
class StockDelta:
    variant_id: str
    delta: int


def to_price(value: object) -> Decimal:
    """Coerce a unit price to Decimal. Floats go through str to keep 39.9 exact."""
    if isinstance(value, Decimal):
        price = value
    else:
        try:
            price = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"Invalid price: {value!r}") from None
    if not price.is_finite() or price < 0:
        raise ValidationError(f"Price must be a non-negative number, got {value!r}")
    return price


def check_quantity(quantity: object) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError(f"Quantity must be a positive whole number, got {quantity!r}")
    return quantity


def _check_ownership(product: Product, variant: ProductVariant) -> None:
    if variant.product_id != product.id:
        raise ValidationError(
            f"Variant {variant.id} does not belong to product {product.id}"
        )


def sale_total(price: Decimal, quantity: int) -> Decimal:
    return price * quantity


def register_sale(
    product: Product,
    variant: ProductVariant,
    quantity: int,
    price: object,
    *,
    now: Optional[datetime] = None,
) -> SaleRegistration:
    """
    Build the sale record and the decremented variant for a sale.

    Raises:
        ValidationError: Bad quantity or price, or variant of another product.
        InsufficientStockError: The variant holds fewer than `quantity` units.
    """
    qty = check_quantity(quantity)
    unit_price = to_price(price)
    _check_ownership(product, variant)
    if variant.stock < qty:
        raise InsufficientStockError(available=variant.stock, requested=qty)

    sale = Sale(
        product_name=product.name,
        size=variant.size,
        color=variant.color,
        quantity=qty,
        price=unit_price,
        total=sale_total(unit_price, qty),
        date=now or datetime.now(timezone.utc),
        product_id=product.id,
        variant_id=variant.id,
    )
    updated = variant.model_copy(update={"stock": variant.stock - qty})
    return SaleRegistration(sale=sale, variant=updated)


def edit_sale(
    sale: Sale,
    *,
    product: Product,
    variant: ProductVariant,
    quantity: int,
    price: object,
) -> Sale:
    """
    Return `sale` with new product, variant, quantity and price.

    The total is recomputed and the snapshot fields are refreshed. Stock is
    not looked at; see reconcile_edit for that.
    """
    qty = check_quantity(quantity)
    unit_price = to_price(price)
    _check_ownership(product, variant)
    return sale.model_copy(
        update={
            "product_name": product.name,
            "size": variant.size,
            "color": variant.color,
            "quantity": qty,
            "price": unit_price,
            "total": sale_total(unit_price, qty),
            "product_id": product.id,
            "variant_id": variant.id,
        }
    )


def reconcile_delete(sale: Sale) -> StockDelta:
    """Stock to give back when a sale is deleted with restocking."""
    if not sale.variant_id:
        raise ValidationError(f"Sale {sale.id} has no variant reference; cannot restock")
    return StockDelta(variant_id=sale.variant_id, delta=sale.quantity)


def reconcile_edit(
    old_sale: Sale,
    new_quantity: int,
    new_variant: ProductVariant,
    old_variant: Optional[ProductVariant] = None,
) -> list[StockDelta]:
    """
    Stock changes that make an edited sale consistent with inventory.

    The old variant gets the old quantity back and the new variant gives up
    the new quantity. When both are the same variant only the net change is
    returned (empty when nothing changes).

    Raises:
        ValidationError: The sale has no variant reference.
        InsufficientStockError: The new variant cannot cover the change.
    """
    if not old_sale.variant_id:
        raise ValidationError(f"Sale {old_sale.id} has no variant reference; cannot restock")
    qty = check_quantity(new_quantity)

    if new_variant.id == old_sale.variant_id:
        delta = old_sale.quantity - qty
        if new_variant.stock + delta < 0:
            raise InsufficientStockError(
                available=new_variant.stock + old_sale.quantity, requested=qty
            )
        return [StockDelta(new_variant.id, delta)] if delta else []

    if new_variant.stock < qty:
        raise InsufficientStockError(available=new_variant.stock, requested=qty)
    deltas = [StockDelta(new_variant.id, -qty)]
    if old_variant is not None:
        deltas.insert(0, StockDelta(old_variant.id, old_sale.quantity))
    return deltas


def search_sales(sales: Iterable[Sale], term: str) -> list[Sale]:
    """Case-insensitive substring match on the product name."""
    needle = (term or "").strip().lower()
    return [s for s in sales if needle in s.product_name.lower()]


def newest_first(sales: Iterable[Sale]) -> list[Sale]:
    return sorted(sales, key=lambda s: s.date, reverse=True)

"""
Inventory screen operations: list variants with their product, adjust stock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from lunestock.domains.inventory import stock as stock_rules
from lunestock.domains.inventory.errors import ValidationError
from lunestock.domains.inventory.models import (
    TABLE_VARIANTS,
    InventoryRow,
    ProductVariant,
    StockPoint,
    parse_inventory_rows,
)
from lunestock.infrastructure.data.store_client import DataStore
from lunestock.services.base import StoreService, utc_now
from lunestock.utils.config import low_stock_threshold
from lunestock.utils.logger import get_logger

logger = get_logger("inventory")

_INVENTORY_COLUMNS = "id,product_id,size,color,stock,updated_at,products(name)"


@dataclass
class InventoryView:
    rows: list[InventoryRow]
    options: dict[str, list[str]] = field(default_factory=dict)
    chart: list[StockPoint] = field(default_factory=list)


class InventoryService(StoreService):
    def __init__(self, store: DataStore, threshold: int | None = None) -> None:
        super().__init__(store)
        self.threshold = threshold if threshold is not None else low_stock_threshold()

    def list_rows(self) -> list[InventoryRow]:
        rows = self._store.select(TABLE_VARIANTS, columns=_INVENTORY_COLUMNS)
        return parse_inventory_rows(rows)

    def load(self) -> InventoryView:
        """Rows plus the filter choices and the stock-per-product chart."""
        rows = self.list_rows()
        return InventoryView(
            rows=rows,
            options=stock_rules.filter_options(rows),
            chart=stock_rules.stock_by_product(rows),
        )

    def is_low(self, row: InventoryRow) -> bool:
        return stock_rules.is_low_stock(row.variant, self.threshold)

    def adjust_stock(
        self,
        variant: ProductVariant,
        operation: stock_rules.StockOperation | str,
        amount: int,
        *,
        now: datetime | None = None,
    ) -> ProductVariant:
        """
        Add or remove units from `variant` and persist the new stock.

        The new value is computed from the stock the caller is showing;
        concurrent edits are last-write-wins. On any store failure the error
        propagates and `variant` (immutable) still holds the old stock.

        Raises:
            ValidationError: `amount` is not a positive whole number, or the
                operation is unknown.
            DataStoreError: The write failed.
            NotFoundError: The variant no longer exists.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError(f"Adjustment amount must be a positive whole number, got {amount!r}")
        op = stock_rules.StockOperation.parse(operation)
        new_stock = stock_rules.adjust_stock(variant.stock, op, amount)
        patch = {"stock": new_stock, "updated_at": (now or utc_now()).isoformat()}
        updated = self._update(ProductVariant, TABLE_VARIANTS, variant.id, patch)
        logger.info(
            "Stock %s %d on variant %s: %d -> %d",
            op.value, amount, variant.id, variant.stock, updated.stock,
        )
        return updated

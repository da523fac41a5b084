"""
Sales screen operations.

Registering a sale touches two tables: a row is added to `sales` and the
variant's stock goes down. The store offers no multi-table transaction, so
the two writes run as a saga: if the stock write fails, the sale row is
deleted again and the original error is raised. Edits and deletes with
`restock=True` follow the same pattern.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from lunestock.domains.inventory import sales as sale_rules
from lunestock.domains.inventory.errors import (
    InsufficientStockError,
    NotFoundError,
    RecordDecodeError,
    ValidationError,
)
from lunestock.domains.inventory.models import (
    TABLE_PRODUCTS,
    TABLE_SALES,
    TABLE_VARIANTS,
    Product,
    ProductVariant,
    Sale,
    parse_row,
)
from lunestock.infrastructure.data.store_client import DataStore, DataStoreError
from lunestock.services.base import StoreService, utc_now
from lunestock.utils.logger import get_logger

logger = get_logger("sales")


class SalesService(StoreService):
    def __init__(self, store: DataStore) -> None:
        super().__init__(store)

    def list_sales(self, search: str = "") -> list[Sale]:
        """All sales, newest first, optionally filtered by product name."""
        sales = self._fetch_all(Sale, TABLE_SALES, order="date.desc")
        if search:
            sales = sale_rules.search_sales(sales, search)
        return sale_rules.newest_first(sales)

    def get_sale(self, sale_id: str) -> Sale:
        return self._fetch_one(Sale, TABLE_SALES, sale_id)

    # --- stock writes ---

    def _shift_stock(self, variant_id: str, delta: int, now: datetime) -> ProductVariant:
        """Change stock by `delta`, only if nobody changed it since we read it."""
        variant = self._fetch_one(ProductVariant, TABLE_VARIANTS, variant_id)
        new_stock = variant.stock + delta
        if new_stock < 0:
            raise InsufficientStockError(available=variant.stock, requested=-delta)
        row = self._store.update(
            TABLE_VARIANTS,
            variant_id,
            {"stock": new_stock, "updated_at": now.isoformat()},
            match={"stock": variant.stock},
        )
        if row is None:
            raise DataStoreError(f"{TABLE_VARIANTS}: stock of {variant_id} changed concurrently")
        return parse_row(ProductVariant, TABLE_VARIANTS, row)

    def _apply_deltas(self, deltas: Iterable[sale_rules.StockDelta], now: datetime) -> None:
        """Apply every delta or none: on failure, applied ones are reverted."""
        applied: list[sale_rules.StockDelta] = []
        try:
            for d in deltas:
                self._shift_stock(d.variant_id, d.delta, now)
                applied.append(d)
        except (DataStoreError, RecordDecodeError, NotFoundError, ValidationError):
            for d in reversed(applied):
                try:
                    self._shift_stock(d.variant_id, -d.delta, now)
                except (DataStoreError, RecordDecodeError, NotFoundError, ValidationError):
                    logger.exception("Could not revert stock change of %+d on %s", d.delta, d.variant_id)
            raise

    # --- registration ---

    def register_sale(
        self,
        product_id: str,
        variant_id: str,
        quantity: int,
        price: object,
        *,
        now: datetime | None = None,
    ) -> Sale:
        """
        Record a sale and take its units out of stock, as one unit of work.

        Raises:
            ValidationError / InsufficientStockError: Rejected before any write.
            NotFoundError: Unknown product or variant.
            DataStoreError: A write failed; the store is left as before
                unless compensation also failed (the message then names the
                orphaned sale).
        """
        moment = now or utc_now()
        product = self._fetch_one(Product, TABLE_PRODUCTS, product_id)
        variant = self._fetch_one(ProductVariant, TABLE_VARIANTS, variant_id)
        try:
            registration = sale_rules.register_sale(product, variant, quantity, price, now=moment)
        except ValidationError as e:
            logger.warning("Sale rejected for variant %s: %s", variant_id, e)
            raise

        inserted = self._store.insert(TABLE_SALES, registration.sale.to_row())
        try:
            saved = parse_row(Sale, TABLE_SALES, inserted)
            row = self._store.update(
                TABLE_VARIANTS,
                variant.id,
                {"stock": registration.variant.stock, "updated_at": moment.isoformat()},
                match={"stock": variant.stock},
            )
            if row is None:
                raise DataStoreError(f"{TABLE_VARIANTS}: stock of {variant.id} changed concurrently")
        except (DataStoreError, RecordDecodeError) as e:
            self._undo_insert(inserted.get("id"), e)
            raise

        logger.info(
            "Sale %s: %d x %s %s/%s at %s = %s",
            saved.id, saved.quantity, saved.product_name, saved.size, saved.color, saved.price, saved.total,
        )
        return saved

    def _undo_insert(self, sale_id: object, cause: Exception) -> None:
        logger.warning("Stock update failed after inserting sale %s (%s); removing the sale", sale_id, cause)
        if not sale_id:
            raise DataStoreError(f"{TABLE_SALES}: inserted sale has no id; cannot roll back ({cause})") from cause
        try:
            self._store.delete(TABLE_SALES, str(sale_id))
        except DataStoreError as undo_err:
            logger.error("Rollback failed: sale %s is recorded without its stock decrement", sale_id)
            raise DataStoreError(
                f"{TABLE_SALES}: stock update failed ({cause}) and removing sale {sale_id} "
                f"also failed ({undo_err})"
            ) from undo_err

    def _restore_sale(self, old: Sale, cause: Exception) -> None:
        logger.warning("Stock correction failed for edited sale %s (%s); restoring the sale", old.id, cause)
        try:
            restored = self._store.update(TABLE_SALES, str(old.id), old.to_row())
            if restored is None:
                raise DataStoreError(f"{TABLE_SALES}: sale {old.id} no longer exists")
        except DataStoreError as undo_err:
            logger.error("Rollback failed: sale %s keeps its edit without the matching stock change", old.id)
            raise DataStoreError(
                f"{TABLE_SALES}: stock correction failed ({cause}) and restoring sale {old.id} "
                f"also failed ({undo_err})"
            ) from undo_err

    def _reinsert_sale(self, sale: Sale, cause: Exception) -> None:
        logger.warning("Restocking failed for deleted sale %s (%s); re-inserting it", sale.id, cause)
        try:
            self._store.insert(TABLE_SALES, {**sale.to_row(), "id": sale.id})
        except DataStoreError as undo_err:
            logger.error("Rollback failed: sale %s is deleted but its units were not returned", sale.id)
            raise DataStoreError(
                f"{TABLE_SALES}: restocking failed ({cause}) and re-inserting sale {sale.id} "
                f"also failed ({undo_err})"
            ) from undo_err

    # --- edit / delete ---

    def edit_sale(
        self,
        sale_id: str,
        product_id: str,
        variant_id: str,
        quantity: int,
        price: object,
        *,
        restock: bool = False,
        now: datetime | None = None,
    ) -> Sale:
        """
        Change a recorded sale and recompute its total.

        With `restock=False` (default) inventory is left alone: the sale is
        treated as a historical record. With `restock=True` the stock of the
        old and new variants is corrected for the change; if that fails the
        sale row is put back as it was.
        """
        moment = now or utc_now()
        old = self.get_sale(sale_id)
        product = self._fetch_one(Product, TABLE_PRODUCTS, product_id)
        variant = self._fetch_one(ProductVariant, TABLE_VARIANTS, variant_id)
        updated = sale_rules.edit_sale(old, product=product, variant=variant, quantity=quantity, price=price)

        deltas: list[sale_rules.StockDelta] = []
        if restock:
            old_variant = None
            if old.variant_id and old.variant_id != variant.id:
                try:
                    old_variant = self._fetch_one(ProductVariant, TABLE_VARIANTS, old.variant_id)
                except NotFoundError:
                    logger.warning("Variant %s of sale %s is gone; not restocking it", old.variant_id, sale_id)
            deltas = sale_rules.reconcile_edit(old, quantity, variant, old_variant)

        saved = self._update(Sale, TABLE_SALES, sale_id, updated.to_row())
        if deltas:
            try:
                self._apply_deltas(deltas, moment)
            except (DataStoreError, RecordDecodeError, NotFoundError, ValidationError) as e:
                self._restore_sale(old, e)
                raise
        logger.info("Sale %s edited (restock=%s)", sale_id, restock)
        return saved

    def delete_sale(self, sale_id: str, *, restock: bool = False, now: datetime | None = None) -> Sale:
        """
        Remove a sale from history and return what was removed.

        With `restock=False` (default) the units sold stay out of stock. With
        `restock=True` they are added back to the variant; if that fails the
        sale is re-inserted with its original id.
        """
        sale = self.get_sale(sale_id)
        deltas = [sale_rules.reconcile_delete(sale)] if restock else []
        self._store.delete(TABLE_SALES, sale_id)
        if deltas:
            try:
                self._apply_deltas(deltas, now or utc_now())
            except (DataStoreError, RecordDecodeError, NotFoundError, ValidationError) as e:
                self._reinsert_sale(sale, e)
                raise
        logger.info("Sale %s deleted (restock=%s)", sale_id, restock)
        return sale

"""
Product and reference-data management (products, variants, sizes, colors).
"""

from __future__ import annotations

from lunestock.domains.inventory import catalog
from lunestock.domains.inventory.models import (
    TABLE_COLORS,
    TABLE_PRODUCTS,
    TABLE_SIZES,
    TABLE_VARIANTS,
    Color,
    Product,
    ProductVariant,
    ProductWithVariants,
    Size,
)
from lunestock.infrastructure.data.store_client import DataStore
from lunestock.services.base import StoreService
from lunestock.utils.logger import get_logger

logger = get_logger("catalog")


class CatalogService(StoreService):
    def __init__(self, store: DataStore) -> None:
        super().__init__(store)

    # --- products ---

    def list_products(self, search: str = "") -> list[ProductWithVariants]:
        products = self._fetch_all(Product, TABLE_PRODUCTS)
        variants = self._fetch_all(ProductVariant, TABLE_VARIANTS)
        items = catalog.group_products(products, variants)
        return catalog.search_products(items, search) if search else items

    def create_product(self, name: str, description: str | None = None) -> Product:
        row = {
            "name": catalog.validate_product_name(name),
            "description": (description or "").strip() or None,
        }
        product = self._insert(Product, TABLE_PRODUCTS, row)
        logger.info("Product %s created: %s", product.id, product.name)
        return product

    def update_product(self, product_id: str, name: str, description: str | None = None) -> Product:
        patch = {
            "name": catalog.validate_product_name(name),
            "description": (description or "").strip() or None,
        }
        return self._update(Product, TABLE_PRODUCTS, product_id, patch)

    def delete_product(self, product_id: str) -> None:
        """Delete a product and its variants. Sales keep their snapshot."""
        for variant in self._fetch_all(ProductVariant, TABLE_VARIANTS, {"product_id": product_id}):
            self._store.delete(TABLE_VARIANTS, variant.id)
        self._store.delete(TABLE_PRODUCTS, product_id)
        logger.info("Product %s deleted", product_id)

    def add_variant(self, product_id: str, size: str, color: str, stock: int = 0) -> ProductVariant:
        self._fetch_one(Product, TABLE_PRODUCTS, product_id)
        row = {
            "product_id": product_id,
            "size": catalog.validate_reference_name(size, "size"),
            "color": catalog.validate_reference_name(color, "color"),
            "stock": catalog.validate_initial_stock(stock),
        }
        variant = self._insert(ProductVariant, TABLE_VARIANTS, row)
        logger.info("Variant %s added to product %s (%s/%s, %d)", variant.id, product_id, variant.size, variant.color, variant.stock)
        return variant

    # --- sizes ---

    def list_sizes(self) -> list[Size]:
        return self._fetch_all(Size, TABLE_SIZES, order="created_at")

    def add_size(self, name: str) -> Size:
        return self._insert(Size, TABLE_SIZES, {"name": catalog.validate_reference_name(name, "size")})

    def rename_size(self, size_id: str, name: str) -> Size:
        return self._update(Size, TABLE_SIZES, size_id, {"name": catalog.validate_reference_name(name, "size")})

    def delete_size(self, size_id: str) -> None:
        self._store.delete(TABLE_SIZES, size_id)

    # --- colors ---

    def list_colors(self) -> list[Color]:
        return self._fetch_all(Color, TABLE_COLORS, order="created_at")

    def add_color(self, name: str, hex_value: str) -> Color:
        row = {"name": catalog.validate_reference_name(name, "color"), "hex": catalog.normalize_hex(hex_value)}
        return self._insert(Color, TABLE_COLORS, row)

    def update_color(self, color_id: str, name: str, hex_value: str) -> Color:
        patch = {"name": catalog.validate_reference_name(name, "color"), "hex": catalog.normalize_hex(hex_value)}
        return self._update(Color, TABLE_COLORS, color_id, patch)

    def delete_color(self, color_id: str) -> None:
        self._store.delete(TABLE_COLORS, color_id)

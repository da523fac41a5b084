"""
In-process data store with the same contract as DataStoreClient.

Used as the offline/demo backend and as a test double. Rows are copied on the
way in and out so callers never share state with the store.
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from lunestock.domains.inventory import catalog
from lunestock.domains.inventory.models import (
    TABLE_COLORS,
    TABLE_PRODUCTS,
    TABLE_SALES,
    TABLE_SIZES,
    TABLE_VARIANTS,
)
from lunestock.infrastructure.data.store_client import DataStoreError, TableNotFoundError
from lunestock.utils.logger import get_logger

logger = get_logger("store")

ALL_TABLES = (TABLE_PRODUCTS, TABLE_VARIANTS, TABLE_SALES, TABLE_SIZES, TABLE_COLORS)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryDataStore:
    """
    Dict-of-lists store. Tables not listed in `tables` do not exist: reads
    from them return [] and writes raise TableNotFoundError.
    """

    def __init__(
        self,
        data: Optional[Mapping[str, Iterable[Mapping[str, Any]]]] = None,
        tables: Iterable[str] = ALL_TABLES,
    ) -> None:
        self._tables: dict[str, list[dict[str, Any]]] = {t: [] for t in tables}
        for table, rows in (data or {}).items():
            if table not in self._tables:
                self._tables[table] = []
            for row in rows:
                self._tables[table].append(dict(row))

    def _table(self, table: str) -> list[dict[str, Any]]:
        try:
            return self._tables[table]
        except KeyError:
            raise TableNotFoundError(f"{table}: relation does not exist", status_code=404, code="42P01") from None

    @staticmethod
    def _matches(row: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
        return all(row.get(k) == v for k, v in filters.items())

    def _embed(self, row: dict[str, Any], columns: str) -> dict[str, Any]:
        # Minimal support for `products(name)` style embedding on variants.
        if "products(" in columns.replace(" ", "") and "product_id" in row:
            parent = next((p for p in self._tables.get(TABLE_PRODUCTS, []) if p.get("id") == row["product_id"]), None)
            row["products"] = {"name": parent.get("name")} if parent else None
        return row

    def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        columns: str = "*",
        order: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        if table not in self._tables:
            logger.warning("Table %s not found; treating as empty", table)
            return []
        rows = [copy.deepcopy(r) for r in self._tables[table] if self._matches(r, filters or {})]
        if order:
            col, _, direction = order.partition(".")
            rows.sort(key=lambda r: (r.get(col) is None, r.get(col)), reverse=direction == "desc")
        return [self._embed(r, columns) for r in rows]

    def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        rows = self._table(table)
        stored = copy.deepcopy(dict(row))
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", _now_iso())
        if any(r.get("id") == stored["id"] for r in rows):
            raise DataStoreError(f"{table}: duplicate id {stored['id']}", status_code=409, code="23505")
        rows.append(stored)
        return copy.deepcopy(stored)

    def update(
        self,
        table: str,
        id: str,
        patch: Mapping[str, Any],
        *,
        match: Optional[Mapping[str, Any]] = None,
    ) -> dict[str, Any] | None:
        for row in self._table(table):
            if row.get("id") == id and self._matches(row, match or {}):
                row.update(copy.deepcopy(dict(patch)))
                return copy.deepcopy(row)
        return None

    def delete(self, table: str, id: str) -> None:
        rows = self._table(table)
        rows[:] = [r for r in rows if r.get("id") != id]

    def rows(self, table: str) -> list[dict[str, Any]]:
        """Raw copy of a table, for inspection."""
        return copy.deepcopy(self._tables.get(table, []))


def seed_reference_data(store: InMemoryDataStore) -> None:
    """Insert the default sizes and colors."""
    for name in catalog.DEFAULT_SIZES:
        store.insert(TABLE_SIZES, {"name": name})
    for name, hex_value in catalog.DEFAULT_COLORS:
        store.insert(TABLE_COLORS, {"name": name, "hex": hex_value})


def demo_store() -> InMemoryDataStore:
    """A store with reference data and two products, for the offline backend."""
    store = InMemoryDataStore()
    seed_reference_data(store)
    polos = [
        ("Polo Básico", "Polo de algodón 100%, corte regular", [("S", "Negro", 15), ("M", "Negro", 10), ("L", "Negro", 20)]),
        ("Polo Estampado", None, [("S", "Blanco", 10), ("M", "Blanco", 10), ("L", "Blanco", 4)]),
    ]
    for name, description, variants in polos:
        product = store.insert(TABLE_PRODUCTS, {"name": name, "description": description})
        for size, color, stock in variants:
            store.insert(
                TABLE_VARIANTS,
                {"product_id": product["id"], "size": size, "color": color, "stock": stock},
            )
    return store

"""Shared fixtures: an in-memory store with two products and three variants."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import pytest

from lunestock.infrastructure.data.memory_store import InMemoryDataStore
from lunestock.infrastructure.data.store_client import DataStoreError


class FlakyStore(InMemoryDataStore):
    """In-memory store whose writes can be made to fail per table and operation."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.fail: set[tuple[str, str]] = set()

    def _maybe_fail(self, op: str, table: str) -> None:
        if (op, table) in self.fail:
            raise DataStoreError(f"{table}: simulated {op} failure", status_code=503)

    def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        self._maybe_fail("insert", table)
        return super().insert(table, row)

    def update(self, table: str, id: str, patch: Mapping[str, Any], *, match: Optional[Mapping[str, Any]] = None):
        self._maybe_fail("update", table)
        return super().update(table, id, patch, match=match)

    def delete(self, table: str, id: str) -> None:
        self._maybe_fail("delete", table)
        super().delete(table, id)

    def stock(self, variant_id: str) -> int:
        return next(r["stock"] for r in self.rows("product_variants") if r["id"] == variant_id)


@pytest.fixture
def store() -> FlakyStore:
    return FlakyStore(
        {
            "products": [
                {"id": "p1", "name": "Polo Básico", "description": "Algodón"},
                {"id": "p2", "name": "Casaca", "description": None},
            ],
            "product_variants": [
                {"id": "v1", "product_id": "p1", "size": "M", "color": "Negro", "stock": 10},
                {"id": "v2", "product_id": "p1", "size": "L", "color": "Negro", "stock": 3},
                {"id": "v3", "product_id": "p2", "size": "M", "color": "Azul", "stock": 0},
            ],
            "sizes": [{"id": "z1", "name": "S", "created_at": "2024-01-01T00:00:00+00:00"}],
            "colors": [{"id": "c1", "name": "Negro", "hex": "#000000", "created_at": "2024-01-01T00:00:00+00:00"}],
        }
    )

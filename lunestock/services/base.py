"""Shared plumbing for services that read and write the data store."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Any, Mapping, Optional, Type

from lunestock.domains.inventory.errors import NotFoundError
from lunestock.domains.inventory.models import R, parse_row, parse_rows
from lunestock.infrastructure.data.store_client import DataStore


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def shop_now(tz: Optional[tzinfo] = None) -> datetime:
    """Current time in `tz`, or in the server's local timezone when None."""
    if tz is None:
        return datetime.now().astimezone()
    return datetime.now(tz)


class StoreService:
    def __init__(self, store: DataStore) -> None:
        self._store = store

    def _fetch_all(
        self,
        model: Type[R],
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[str] = None,
    ) -> list[R]:
        return parse_rows(model, table, self._store.select(table, filters, order=order))

    def _fetch_one(self, model: Type[R], table: str, record_id: str) -> R:
        rows = self._store.select(table, {"id": record_id})
        if not rows:
            raise NotFoundError(table, record_id)
        return parse_row(model, table, rows[0])

    def _insert(self, model: Type[R], table: str, row: Mapping[str, Any]) -> R:
        return parse_row(model, table, self._store.insert(table, row))

    def _update(self, model: Type[R], table: str, record_id: str, patch: Mapping[str, Any]) -> R:
        row = self._store.update(table, record_id, patch)
        if row is None:
            raise NotFoundError(table, record_id)
        return parse_row(model, table, row)

"""
Hosted data store client (PostgREST-style REST API).

Every call is one request/response round trip. Nothing is retried or cached:
a failed request raises DataStoreError and the caller decides what to show.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping, Optional, Protocol

import requests

from lunestock.utils.config import request_timeout, store_api_key, store_url
from lunestock.utils.logger import get_logger

logger = get_logger("store")

REST_PATH = "/rest/v1"

# PostgREST / Postgres codes for "relation does not exist"
_MISSING_TABLE_CODES = {"42P01", "PGRST205"}


class DataStoreError(RuntimeError):
    """Raised when the data store rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class TableNotFoundError(DataStoreError):
    """The requested table is not provisioned in the store."""


class DataStore(Protocol):
    """Contract shared by the REST client and the in-memory store."""

    def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        columns: str = "*",
        order: Optional[str] = None,
    ) -> list[dict[str, Any]]: ...

    def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]: ...

    def update(
        self,
        table: str,
        id: str,
        patch: Mapping[str, Any],
        *,
        match: Optional[Mapping[str, Any]] = None,
    ) -> dict[str, Any] | None: ...

    def delete(self, table: str, id: str) -> None: ...


def _eq(value: Any) -> str:
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    if value is None:
        return "is.null"
    return f"eq.{value}"


def _error_from_response(response: Any, table: str) -> DataStoreError:
    status = getattr(response, "status_code", None)
    message = ""
    code = None
    try:
        body = response.json()
        if isinstance(body, dict):
            message = str(body.get("message") or body.get("error") or "")
            code = body.get("code")
    except ValueError:
        message = ""
    if not message:
        message = getattr(response, "reason", "") or f"HTTP {status}"
    text = f"{table}: {message}"
    if status == 404 or code in _MISSING_TABLE_CODES:
        return TableNotFoundError(text, status_code=status, code=code)
    return DataStoreError(text, status_code=status, code=code)


class DataStoreClient:
    """
    REST client for the hosted store.

    Tables are exposed under `{base_url}/rest/v1/{table}`; rows are JSON
    objects. Filters are equality matches (`col=eq.value`).
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        token_provider: Callable[[], str | None] | None = None,
        timeout: float | None = None,
    ) -> None:
        self._base_url = (base_url or store_url()).rstrip("/")
        self._api_key = api_key or store_api_key()
        self._token_provider = token_provider
        self._timeout = timeout if timeout is not None else request_timeout()

    def _headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token or self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Prefer": "return=representation",
        }

    def _url(self, table: str) -> str:
        return f"{self._base_url}{REST_PATH}/{table}"

    def _request(
        self,
        method: str,
        table: str,
        params: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> Any:
        try:
            r = requests.request(
                method,
                self._url(table),
                params=dict(params or {}),
                json=body,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, table, e)
            raise DataStoreError(f"{table}: could not reach the data store ({type(e).__name__})") from e

        if not 200 <= r.status_code < 300:
            err = _error_from_response(r, table)
            logger.warning("%s %s -> %s: %s", method, table, r.status_code, err)
            raise err

        if not r.content:
            return None
        try:
            return r.json()
        except (ValueError, json.JSONDecodeError) as e:
            raise DataStoreError(f"{table}: invalid JSON in response", status_code=r.status_code) from e

    def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        columns: str = "*",
        order: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch rows from `table`.

        Returns an empty list (and logs a warning) when the table does not
        exist, so screens can render with no data instead of failing.

        Raises:
            DataStoreError: Any other store or transport failure.
        """
        params = {"select": columns}
        for col, val in (filters or {}).items():
            params[col] = _eq(val)
        if order:
            params["order"] = order
        try:
            data = self._request("GET", table, params=params)
        except TableNotFoundError:
            logger.warning("Table %s not found; treating as empty", table)
            return []
        if data is None:
            return []
        if not isinstance(data, list):
            raise DataStoreError(f"{table}: expected a list of rows, got {type(data).__name__}")
        return data

    def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored (with its id)."""
        data = self._request("POST", table, body=dict(row))
        rows = data if isinstance(data, list) else [data] if isinstance(data, dict) else []
        if not rows:
            raise DataStoreError(f"{table}: insert returned no row")
        return rows[0]

    def update(
        self,
        table: str,
        id: str,
        patch: Mapping[str, Any],
        *,
        match: Optional[Mapping[str, Any]] = None,
    ) -> dict[str, Any] | None:
        """
        Patch the row with `id`. Extra `match` conditions make the write
        conditional; None is returned when no row matched.
        """
        params = {"id": _eq(id)}
        for col, val in (match or {}).items():
            params[col] = _eq(val)
        data = self._request("PATCH", table, params=params, body=dict(patch))
        if isinstance(data, list):
            return data[0] if data else None
        return data if isinstance(data, dict) else None

    def delete(self, table: str, id: str) -> None:
        self._request("DELETE", table, params={"id": _eq(id)})

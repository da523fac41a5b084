"""
Tests for backend wiring.
"""

from __future__ import annotations

import pytest

from lunestock.infrastructure.auth.auth_client import LocalAuthClient
from lunestock.infrastructure.data.memory_store import InMemoryDataStore
from lunestock.infrastructure.data.store_client import DataStoreClient
from lunestock.services.backend import Clients, build_backend, build_clients
from lunestock.utils import config


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "load_config", lambda: None)
    for key in ("LUNESTOCK_STORE_URL", "LUNESTOCK_STORE_KEY", "LUNESTOCK_BACKEND", "LUNESTOCK_SESSION_FILE"):
        monkeypatch.delenv(key, raising=False)


def test_memory_backend() -> None:
    """Without a store URL the demo store and local login are used."""
    b = build_backend()
    assert isinstance(b.store, InMemoryDataStore)
    assert not b.session.is_authenticated
    b.session.login("admin@lunestock.local", "admin")
    assert b.dashboard.load().stats.total_products == 2
    assert b.inventory.load().rows


def test_visitors_share_clients_not_sessions() -> None:
    """Two backends built from the same clients share data but not the login."""
    clients = build_clients()
    assert isinstance(clients.auth, LocalAuthClient)
    first = build_backend(clients)
    second = build_backend(clients)
    first.session.login("admin@lunestock.local", "admin")
    assert first.session.is_authenticated
    assert not second.session.is_authenticated
    assert first.store is second.store

    second.session.login("admin@lunestock.local", "admin")
    first.session.logout()
    assert second.session.is_authenticated


def test_rest_backend_uses_own_session_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Each REST client sends the token of its own visitor's session."""
    monkeypatch.setenv("LUNESTOCK_STORE_URL", "https://store.example.com")
    monkeypatch.setenv("LUNESTOCK_STORE_KEY", "anon-key")
    clients = build_clients()
    assert clients.shared_store is None
    auth = LocalAuthClient({"ana@lune.pe": "secret"})
    first = build_backend(Clients(auth=auth))
    second = build_backend(Clients(auth=auth))
    assert isinstance(first.store, DataStoreClient)
    first.session.login("ana@lune.pe", "secret")
    assert first.store._headers()["Authorization"] == f"Bearer {first.session.access_token}"
    assert second.store._headers()["Authorization"] == "Bearer anon-key"


def test_no_session_file_by_default() -> None:
    """Without LUNESTOCK_SESSION_FILE nothing is restored from disk."""
    assert config.session_file() is None
    assert build_backend().session._token_file is None

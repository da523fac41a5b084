"""Data store bindings: hosted REST store and in-memory store."""

from lunestock.infrastructure.data.memory_store import InMemoryDataStore
from lunestock.infrastructure.data.store_client import (
    DataStore,
    DataStoreClient,
    DataStoreError,
    TableNotFoundError,
)

__all__ = ["DataStore", "DataStoreClient", "DataStoreError", "InMemoryDataStore", "TableNotFoundError"]

"""Wire the configured store binding, the session and the services together.

`build_clients()` creates what every visitor may share: the identity client
and, for the offline backend, the demo store. `build_backend()` creates one
visitor's Session and the services bound to it. The Streamlit app caches the
first and keeps the second in `st.session_state`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from lunestock.infrastructure.auth.auth_client import AuthClient, LocalAuthClient
from lunestock.infrastructure.data.memory_store import InMemoryDataStore, demo_store
from lunestock.infrastructure.data.store_client import DataStore, DataStoreClient
from lunestock.services.catalog_service import CatalogService
from lunestock.services.dashboard_service import DashboardService
from lunestock.services.inventory_service import InventoryService
from lunestock.services.sales_service import SalesService
from lunestock.services.session import IdentityProvider, Session
from lunestock.utils.config import BACKEND_REST, session_file, store_backend
from lunestock.utils.logger import get_logger

logger = get_logger()


@dataclass(frozen=True)
class Clients:
    """Stateless (or process-wide) collaborators, safe to share across visitors."""

    auth: IdentityProvider
    shared_store: Optional[InMemoryDataStore] = None


@dataclass
class Backend:
    store: DataStore
    session: Session
    inventory: InventoryService
    sales: SalesService
    catalog: CatalogService
    dashboard: DashboardService


def make_backend(store: DataStore, session: Session) -> Backend:
    return Backend(
        store=store,
        session=session,
        inventory=InventoryService(store),
        sales=SalesService(store),
        catalog=CatalogService(store),
        dashboard=DashboardService(store),
    )


def build_clients() -> Clients:
    """Clients for the backend selected by LUNESTOCK_BACKEND."""
    if store_backend() == BACKEND_REST:
        logger.info("Using hosted data store")
        return Clients(auth=AuthClient())
    logger.info("Using in-memory demo store")
    return Clients(auth=LocalAuthClient(), shared_store=demo_store())


def build_backend(clients: Clients | None = None) -> Backend:
    """
    Build one visitor's backend: a fresh Session and a store that sends that
    session's token.

    A saved token is only restored when LUNESTOCK_SESSION_FILE is set.
    """
    clients = clients or build_clients()
    session = Session(clients.auth, token_file=session_file())
    if clients.shared_store is not None:
        store: DataStore = clients.shared_store
    else:
        store = DataStoreClient(token_provider=lambda: session.access_token)
    session.restore()
    return make_backend(store, session)

"""
Pytest configuration and shared fixtures for COSMOS_DIAG tests.

This module provides:
- Configuration fixtures
- An in-memory stand-in for the Cosmos DB MongoDB API that keeps the last
  request per connection
- Logical session fixtures built on it
"""

import copy
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
import pytest
from bson import ObjectId
from pymongo.errors import ConfigurationError

from cosmos_diag.config import DemoConfig
from cosmos_diag.database.pool import DedicatedClientPool
from cosmos_diag.database.session import LogicalSession
from cosmos_diag.observability import clear_correlation_id, clear_session_context
from cosmos_diag.observability.metrics import get_metrics_collector


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: tests that need a real MongoDB (testcontainers)"
    )


# ============================================================================
# FAKE COSMOS DB STORE
# ============================================================================

REQUEST_CHARGES = {
    "insert": 10.29,
    "find": 2.31,
    "update": 10.67,
    "delete": 10.29,
}


def _matches(doc: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in filter.items())


class FakeCosmosStore:
    """
    Shared backing store for fake clients.

    Statistics are tracked per connection, the way Cosmos DB tracks them.
    Each FakeMongoClient stands for one client capped at a single connection.
    """

    def __init__(self) -> None:
        self.collections: Dict[str, List[Dict[str, Any]]] = {}
        self.last_request: Dict[int, str] = {}
        self.commands: List[str] = []
        self.failing_commands: Dict[str, Exception] = {}

    def record(self, connection_id: int, command_name: str) -> None:
        self.last_request[connection_id] = command_name

    def documents(self, name: str) -> List[Dict[str, Any]]:
        return self.collections.setdefault(name, [])


class FakeCollection:
    def __init__(self, client: "FakeMongoClient", name: str) -> None:
        self._client = client
        self._store = client.store
        self.name = name

    def _record(self, command_name: str, session: Any) -> None:
        self._client.check_session(session)
        self._store.record(self._client.connection_id, command_name)

    def insert_one(self, doc: Dict[str, Any], session: Any = None):
        self._record("insert", session)
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", ObjectId())
        self._store.documents(self.name).append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    def find_one(self, filter: Dict[str, Any], session: Any = None):
        self._record("find", session)
        for doc in self._store.documents(self.name):
            if _matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    def update_one(self, filter: Dict[str, Any], update: Dict[str, Any], session: Any = None):
        self._record("update", session)
        for doc in self._store.documents(self.name):
            if _matches(doc, filter):
                changes = update.get("$set", {})
                modified = any(doc.get(k) != v for k, v in changes.items())
                doc.update(changes)
                return SimpleNamespace(matched_count=1, modified_count=int(modified))
        return SimpleNamespace(matched_count=0, modified_count=0)

    def delete_one(self, filter: Dict[str, Any], session: Any = None):
        self._record("delete", session)
        docs = self._store.documents(self.name)
        for index, doc in enumerate(docs):
            if _matches(doc, filter):
                del docs[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self, client: "FakeMongoClient", name: str) -> None:
        self._client = client
        self._store = client.store
        self.name = name

    def get_collection(self, name: str) -> FakeCollection:
        return FakeCollection(self._client, name)

    def command(self, name: str, session: Any = None) -> Dict[str, Any]:
        self._client.check_session(session)
        self._store.commands.append(name)
        if name in self._store.failing_commands:
            raise self._store.failing_commands[name]
        if name == "getLastRequestStatistics":
            command_name = self._store.last_request.get(self._client.connection_id, "")
            return {
                "CommandName": command_name,
                "RequestCharge": REQUEST_CHARGES.get(command_name, 0.0),
                "RequestDurationInMilliSeconds": 1.5,
                "ok": 1.0,
            }
        return {"ok": 1.0}


class FakeMongoClient:
    """
    One client, one connection.

    Like the legacy Cosmos DB endpoint, the fake does not advertise
    logical session support: explicit sessions are rejected the way
    pymongo rejects them.
    """

    def __init__(
        self,
        store: Optional[FakeCosmosStore] = None,
        connection_id: int = 1,
        **kwargs: Any,
    ) -> None:
        self.store = store or FakeCosmosStore()
        self.connection_id = connection_id
        self.kwargs = kwargs
        self.admin = FakeDatabase(self, "admin")
        self.closed = False

    def check_session(self, session: Any) -> None:
        if session is not None:
            self.start_session()

    def start_session(self) -> Any:
        raise ConfigurationError("Sessions are not supported by this MongoDB deployment")

    def get_database(self, name: str, write_concern: Any = None) -> FakeDatabase:
        return FakeDatabase(self, name)

    def close(self) -> None:
        self.closed = True


class FakeClientFactory:
    """Stands in for the MongoClient class: every call opens a new connection."""

    def __init__(self, store: FakeCosmosStore) -> None:
        self.store = store
        self.clients: List[FakeMongoClient] = []

    def __call__(self, *args: Any, **kwargs: Any) -> FakeMongoClient:
        client = FakeMongoClient(self.store, connection_id=len(self.clients) + 1, **kwargs)
        self.clients.append(client)
        return client


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def reset_observability():
    """Give every test a clean metrics collector and logging context."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()
    clear_correlation_id()
    clear_session_context()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every environment variable the configuration reads."""
    for var in [
        "AZURE_DATABASE",
        "AZURE_DATABASE_PASSWORD",
        "AZURE_DATABASE_NAME",
        "AZURE_COLLECTION_NAME",
        "AZURE_COSMOS_HOST_SUFFIX",
        "AZURE_COSMOS_PORT",
        "AZURE_CONNECT_TIMEOUT_MS",
        "MONGO_MAX_POOL_SIZE",
    ]:
        monkeypatch.delenv(var, raising=False)
    yield monkeypatch


@pytest.fixture
def demo_config(clean_env) -> DemoConfig:
    """Provide a valid configuration that does not depend on the environment."""
    return DemoConfig(account_name="test-account", password="test-password")


@pytest.fixture
def fake_store() -> FakeCosmosStore:
    return FakeCosmosStore()


@pytest.fixture
def fake_client(fake_store: FakeCosmosStore) -> FakeMongoClient:
    """A single client outside any pool."""
    return FakeMongoClient(fake_store, connection_id=0)


@pytest.fixture
def fake_clients(fake_store: FakeCosmosStore) -> FakeClientFactory:
    """Patch target for MongoClient; keeps every client it built."""
    return FakeClientFactory(fake_store)


@pytest.fixture
def client_pool(fake_clients: FakeClientFactory) -> DedicatedClientPool:
    return DedicatedClientPool(fake_clients, max_clients=10)


@pytest.fixture
def logical_session(client_pool: DedicatedClientPool) -> LogicalSession:
    """The primary logical session, on the first dedicated connection."""
    session = LogicalSession(client_pool.acquire(), "test-account", pool=client_pool)
    yield session
    session.close()


@pytest.fixture
def echo_lines() -> List[str]:
    """Collects lines printed by the reporter and the demo flows."""
    return []


# ============================================================================
# TESTCONTAINERS FIXTURES (Real MongoDB for Integration Tests)
# ============================================================================


@pytest.fixture(scope="session")
def mongodb_container():
    """
    Start a MongoDB container for integration tests.

    Session-scoped: the container starts once and is reused. Cosmos DB is
    not available locally, so these tests cover the CRUD path only.
    """
    try:
        from testcontainers.mongodb import MongoDbContainer
    except ImportError:
        pytest.skip("testcontainers not installed. Install with: pip install -e '.[test]'")

    try:
        container = MongoDbContainer(image="mongo:7.0")
        container.start()
    except Exception as e:  # Docker unavailable
        pytest.skip(f"Could not start MongoDB container: {e}")

    yield container
    container.stop()


@pytest.fixture
def real_logical_session(mongodb_container):
    """
    The primary logical session on a pool of real single-connection clients.

    Uses a unique database per test and drops it afterwards.
    """
    import os

    from pymongo import MongoClient

    url = mongodb_container.get_connection_url()
    pool = DedicatedClientPool(lambda: MongoClient(url, w=1, maxPoolSize=1), max_clients=4)
    client = pool.acquire()
    db_name = f"cosmos_diag_test_{os.getpid()}_{id(client)}"
    session = LogicalSession(client, db_name, pool=pool)

    yield session

    client.drop_database(db_name)
    session.close()
    pool.close()

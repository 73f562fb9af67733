"""
Common fixtures for the DataStore tests.
"""
import pytest

from datastore import DataStore, DataStoreConfig
from fakes import FakeClient


@pytest.fixture
def config() -> DataStoreConfig:
    return DataStoreConfig(url="mongodb://127.0.0.1:27017", database_name="tests", timeout=100)


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def store(config, client) -> DataStore:
    return DataStore(config, client=client)


@pytest.fixture
def users(client):
    """The in-memory collection backing the "users" collection of the test store."""
    return client["tests"]["users"]

"""Test configuration for the MongoDB adapter package."""

import pytest
from mongomock_motor import AsyncMongoMockClient
from rawql_core.engine import QueryEngine
from rawql_persistence_mongo import MongoAdapter, MongoConnectionManager

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
async def mongo_connection():
    """Connection manager backed by mongomock instead of a real server."""
    connection = MongoConnectionManager.__new__(MongoConnectionManager)
    connection._client = AsyncMongoMockClient(default_database_name="test_db")
    connection._url = "mongodb://mock:27017"

    # Make connect() return the client and mark as "connected"
    async def _mock_connect():
        return connection._client

    connection.connect = _mock_connect

    yield connection


@pytest.fixture
def mongo_adapter(mongo_connection) -> MongoAdapter:
    adapter = MongoAdapter(mongo_connection, database="test_db")
    adapter.register("users")
    adapter.register("posts", refs={"author": "users", "tags": ("tags", True)})
    adapter.register("tags")
    return adapter


@pytest.fixture
def engine(mongo_adapter) -> QueryEngine:
    return QueryEngine(mongo_adapter)


@pytest.fixture
async def db(mongo_connection):
    return await mongo_connection.database("test_db")

"""
Pytest configuration and fixtures for sqlacl tests.

Provides a SQLite-backed engine and store, plus a mock engine for checking
the statements the schema manager issues.
"""

from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from sqlacl.config import AclConfig
from sqlacl.store import AclStore


@pytest.fixture
def database_url(tmp_path):
    """URL of a fresh SQLite database file."""
    return f"sqlite+aiosqlite:///{tmp_path / 'acl.db'}"


@pytest.fixture
async def engine(database_url):
    """Create a SQLite engine and dispose it after the test."""
    engine = create_async_engine(database_url)
    yield engine
    await engine.dispose()


@pytest.fixture
async def store(engine):
    """Create a store with freshly created tables."""
    store = AclStore(engine, prefix="acl_")
    await store.setup()
    return store


@pytest.fixture
def idle_engine(database_url):
    """Engine that is never connected, for tests that must not do I/O."""
    return create_async_engine(database_url)


@pytest.fixture
def unset_store(idle_engine):
    """Store whose tables have not been created."""
    return AclStore(idle_engine, prefix="acl_")


@pytest.fixture
def acl_config(database_url):
    """Create a test AclConfig pointing at the SQLite database."""
    return AclConfig(db_url=database_url, prefix="acl_")


@pytest.fixture
def mock_engine():
    """
    Mock AsyncEngine recording executed statements.

    ``engine.connect()`` yields ``engine.mock_conn``, whose ``execute`` and
    ``commit`` are AsyncMocks.
    """
    conn = AsyncMock()
    engine = MagicMock()
    engine.dialect.name = "postgresql"
    engine.connect.return_value.__aenter__.return_value = conn
    engine.connect.return_value.__aexit__.return_value = False
    engine.mock_conn = conn
    return engine


def executed_sql(conn) -> List[str]:
    """SQL text of every statement passed to a mock connection's execute()."""
    return [str(call.args[0]) for call in conn.execute.call_args_list]


async def fetch_rows(engine: AsyncEngine, table_name: str) -> List[tuple]:
    """Return ``(acl_key, acl_value)`` rows of a table in id order."""
    async with engine.connect() as conn:
        result = await conn.execute(text(f"SELECT acl_key, acl_value FROM {table_name} ORDER BY id"))
        return [tuple(row) for row in result]


async def insert_raw(engine: AsyncEngine, table_name: str, key: str, value: str) -> None:
    """Insert a row without going through the store."""
    async with engine.begin() as conn:
        await conn.execute(
            text(f"INSERT INTO {table_name} (acl_key, acl_value) VALUES (:key, :value)"),
            {"key": key, "value": value},
        )

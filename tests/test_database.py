"""
Tests for sqlacl.utils.database module.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from sqlacl.config import AclConfig
from sqlacl.exceptions import ConfigurationError
from sqlacl.utils.database import build_url, create_engine_from_args, create_engine_from_config


class TestBuildUrl:
    """Tests for building URLs from parts."""

    def test_defaults(self):
        url = build_url("acl", "postgres", "secret")
        assert url.drivername == "postgresql+psycopg"
        assert url.host == "127.0.0.1"
        assert url.port == 5432
        assert url.username == "postgres"
        assert url.password == "secret"
        assert url.database == "acl"

    def test_explicit_host_and_port(self):
        url = build_url("acl", "postgres", host="db.internal", port=6543)
        assert url.host == "db.internal"
        assert url.port == 6543
        assert url.password is None

    def test_missing_db_name(self):
        with pytest.raises(ConfigurationError, match="db_name"):
            build_url(None, "postgres")

    def test_missing_username(self):
        with pytest.raises(ConfigurationError, match="username"):
            build_url("acl", "")


class TestCreateEngine:
    """Tests for engine selection order."""

    @pytest.mark.asyncio
    async def test_engine_wins(self, database_url):
        engine = create_async_engine(database_url)
        try:
            assert create_engine_from_args(url="sqlite+aiosqlite:///other.db", engine=engine) is engine
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_url_wins_over_parts(self, database_url):
        engine = create_engine_from_args(db_name="ignored", username="ignored", url=database_url)
        try:
            assert isinstance(engine, AsyncEngine)
            assert engine.dialect.name == "sqlite"
        finally:
            await engine.dispose()

    def test_parts_require_db_name(self):
        with pytest.raises(ConfigurationError):
            create_engine_from_args(username="postgres")

    @pytest.mark.asyncio
    async def test_from_config(self, database_url):
        engine = create_engine_from_config(AclConfig(db_url=database_url, debug=True))
        try:
            assert engine.dialect.name == "sqlite"
            assert engine.sync_engine.echo is True
        finally:
            await engine.dispose()

"""
Tests for sqlacl.config module.
"""

import pytest
from pydantic import ValidationError

from sqlacl.config import AclConfig, load_config
from sqlacl.store.buckets import BucketNames


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from ACL_* variables and any .env file."""
    monkeypatch.chdir(tmp_path)
    for name in ("ACL_DB_NAME", "ACL_USERNAME", "ACL_PASSWORD", "ACL_DB_URL", "ACL_PREFIX", "ACL_DEBUG"):
        monkeypatch.delenv(name, raising=False)


class TestAclConfig:
    """Tests for AclConfig class."""

    def test_defaults(self):
        config = AclConfig()
        assert config.db_host == "127.0.0.1"
        assert config.db_port == 5432
        assert config.db_url is None
        assert config.driver == "postgresql+psycopg"
        assert config.prefix == "acl_"
        assert config.buckets == BucketNames()
        assert config.debug is False

    def test_config_with_all_options(self):
        config = AclConfig(
            db_name="acl",
            username="postgres",
            password="secret",
            db_host="db.internal",
            db_port=6543,
            prefix="app_",
            buckets={"users": "members"},
            debug=True,
        )
        assert config.db_name == "acl"
        assert config.db_port == 6543
        assert config.prefix == "app_"
        assert config.buckets.users == "members"
        assert config.debug is True

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("ACL_DB_NAME", "acl")
        monkeypatch.setenv("ACL_USERNAME", "postgres")
        monkeypatch.setenv("ACL_PREFIX", "env_")
        monkeypatch.setenv("ACL_BUCKETS__ROLES", "groups")

        config = load_config()
        assert config.db_name == "acl"
        assert config.username == "postgres"
        assert config.prefix == "env_"
        assert config.buckets.roles == "groups"
        assert config.buckets.users == "users"

    def test_from_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("ACL_DB_URL=sqlite+aiosqlite:///acl.db\n")

        assert load_config().db_url == "sqlite+aiosqlite:///acl.db"

    def test_kwargs_override_environment(self, monkeypatch):
        monkeypatch.setenv("ACL_PREFIX", "env_")

        assert load_config(prefix="kw_").prefix == "kw_"

    def test_empty_prefix_allowed(self):
        assert AclConfig(prefix="").prefix == ""

    @pytest.mark.parametrize("prefix", ["acl-", "acl_; DROP", "a b"])
    def test_prefix_validation(self, prefix):
        with pytest.raises(ValidationError):
            AclConfig(prefix=prefix)

    @pytest.mark.parametrize("port", [0, 70000])
    def test_port_validation(self, port):
        with pytest.raises(ValidationError):
            AclConfig(db_port=port)

"""
sqlacl configuration management.

Loads configuration from environment variables or .env file.
"""

import re
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .store.buckets import BucketNames

_PREFIX_PATTERN = re.compile(r"^[A-Za-z0-9_]*$")


class AclConfig(BaseSettings):
    """
    sqlacl configuration settings.

    Can be loaded from:
    1. Environment variables (ACL_DB_NAME, ACL_USERNAME, ACL_DB_URL, etc.)
    2. .env file in project root
    3. Direct instantiation with kwargs

    Either ``db_url`` or ``db_name`` + ``username`` must be set before an
    engine can be built from the config.

    Example:
        ```python
        # From environment
        config = AclConfig()

        # Direct instantiation
        config = AclConfig(db_name="acl", username="postgres", password="secret")
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="ACL_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Connection
    db_name: Optional[str] = Field(default=None, description="Database name")
    username: Optional[str] = Field(default=None, description="Database user")
    password: Optional[str] = Field(default=None, description="Database password")
    db_host: str = Field(default="127.0.0.1", description="Database host")
    db_port: int = Field(default=5432, description="Database port")

    db_url: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL; overrides host, port and credentials",
    )

    driver: str = Field(
        default="postgresql+psycopg",
        description="SQLAlchemy async driver used when building a URL from parts",
    )

    # Tables
    prefix: str = Field(default="acl_", description="Table-name prefix")

    buckets: BucketNames = Field(
        default_factory=BucketNames,
        description="Table-name aliases for the canonical buckets",
    )

    # Debug
    debug: bool = Field(default=False, description="Enable debug logging and SQL echo")

    @field_validator("db_port")
    @classmethod
    def validate_db_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("db_port must be between 1 and 65535")
        return v

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Table prefixes are pasted into DDL, so only identifier characters are allowed."""
        if not _PREFIX_PATTERN.match(v):
            raise ValueError("prefix may only contain letters, digits and underscores")
        return v


def load_config(**kwargs) -> AclConfig:
    """
    Load sqlacl configuration.

    Priority order:
    1. Keyword arguments
    2. Environment variables (ACL_*)
    3. .env file

    Args:
        **kwargs: Override configuration values

    Returns:
        AclConfig instance

    Raises:
        ValidationError: If a field is invalid
    """
    return AclConfig(**kwargs)

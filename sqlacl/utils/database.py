"""
Database engine construction for sqlacl.

Builds a SQLAlchemy ``AsyncEngine`` from connection settings. A pre-built
engine wins over a URL, and a URL wins over host/port/credentials.

Package versions this was built against:
- sqlalchemy: 2.0
- psycopg: 3.1
"""

from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from ..exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..config import AclConfig

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5432
DEFAULT_DRIVER = "postgresql+psycopg"


def build_url(
    db_name: Optional[str],
    username: Optional[str],
    password: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    driver: str = DEFAULT_DRIVER,
) -> URL:
    """
    Build a connection URL from its parts.

    Raises:
        ConfigurationError: If ``db_name`` or ``username`` is missing
    """
    if not db_name:
        raise ConfigurationError("no db_name supplied")
    if not username:
        raise ConfigurationError("no username supplied")

    return URL.create(
        drivername=driver,
        username=username,
        password=password or None,
        host=host or DEFAULT_HOST,
        port=port or DEFAULT_PORT,
        database=db_name,
    )


def create_engine_from_args(
    db_name: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    url: Union[str, URL, None] = None,
    engine: Optional[AsyncEngine] = None,
    driver: str = DEFAULT_DRIVER,
    **engine_kwargs: Any,
) -> AsyncEngine:
    """
    Return an engine for the given connection settings.

    Args:
        db_name: Database name
        username: Database user
        password: Database password
        host: Database host (default ``127.0.0.1``)
        port: Database port (default ``5432``)
        url: Full connection URL, used instead of the parts above
        engine: Pre-built engine, returned unchanged
        driver: SQLAlchemy driver name used when building from parts
        **engine_kwargs: Passed to ``create_async_engine``

    Returns:
        AsyncEngine

    Example:
        ```python
        engine = create_engine_from_args("acl", "postgres", "secret")
        engine = create_engine_from_args(url="sqlite+aiosqlite:///acl.db")
        ```
    """
    if engine is not None:
        return engine
    if url:
        return create_async_engine(make_url(url), **engine_kwargs)
    return create_async_engine(
        build_url(db_name, username, password, host, port, driver),
        **engine_kwargs,
    )


def create_engine_from_config(config: "AclConfig", **engine_kwargs: Any) -> AsyncEngine:
    """Build an engine from an ``AclConfig``."""
    kwargs: Dict[str, Any] = {"echo": config.debug}
    kwargs.update(engine_kwargs)
    return create_engine_from_args(
        db_name=config.db_name,
        username=config.username,
        password=config.password,
        host=config.db_host,
        port=config.db_port,
        url=config.db_url,
        driver=config.driver,
        **kwargs,
    )

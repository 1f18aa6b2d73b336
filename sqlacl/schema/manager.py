"""
Schema management for the ACL tables.

Creates and drops the six bucket tables. Statements are SQL templates with
``{{name}}`` placeholders and run strictly one after another, each committed
before the next is issued.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from ..exceptions import ConfigurationError, StorageError
from ..store.buckets import CANONICAL_BUCKETS, BucketNames, bucket_names

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "acl_"

DOWN_SQL = [
    "DROP TABLE IF EXISTS {{prefix}}{{meta}}",
    "DROP TABLE IF EXISTS {{prefix}}{{resources}}",
    "DROP TABLE IF EXISTS {{prefix}}{{parents}}",
    "DROP TABLE IF EXISTS {{prefix}}{{users}}",
    "DROP TABLE IF EXISTS {{prefix}}{{roles}}",
    "DROP TABLE IF EXISTS {{prefix}}{{permissions}}",
]

_COLUMNS = "(id {{id_column}}, acl_key TEXT NOT NULL, acl_value TEXT NOT NULL)"

UP_SQL = [
    "CREATE TABLE {{prefix}}{{meta}} " + _COLUMNS,
    "INSERT INTO {{prefix}}{{meta}} (acl_key, acl_value) VALUES ('users', '[]')",
    "INSERT INTO {{prefix}}{{meta}} (acl_key, acl_value) VALUES ('roles', '[]')",
    "CREATE TABLE {{prefix}}{{resources}} " + _COLUMNS,
    "CREATE TABLE {{prefix}}{{parents}} " + _COLUMNS,
    "CREATE TABLE {{prefix}}{{roles}} " + _COLUMNS,
    "CREATE TABLE {{prefix}}{{users}} " + _COLUMNS,
    "CREATE TABLE {{prefix}}{{permissions}} " + _COLUMNS,
]

# Auto-increment primary key per SQLAlchemy dialect name
ID_COLUMNS = {
    "postgresql": "SERIAL PRIMARY KEY",
    "sqlite": "INTEGER PRIMARY KEY AUTOINCREMENT",
    "mysql": "INT UNSIGNED NOT NULL AUTO_INCREMENT PRIMARY KEY",
}

_PLACEHOLDER = re.compile(r"{{(\w+)}}")


def render_statement(template: str, context: Dict[str, str]) -> str:
    """
    Substitute ``{{name}}`` placeholders.

    Placeholders missing from ``context`` are left as they are.

    >>> render_statement("DROP TABLE IF EXISTS {{prefix}}{{users}}", {"prefix": "acl_", "users": "users"})
    'DROP TABLE IF EXISTS acl_users'
    """
    return _PLACEHOLDER.sub(lambda match: context.get(match.group(1), match.group(0)), template)


def resolve_prefix(prefix: Optional[str]) -> str:
    return DEFAULT_PREFIX if prefix is None else prefix


def table_names(
    prefix: Optional[str] = None,
    buckets: Union[BucketNames, Dict[str, Any], None] = None,
) -> List[str]:
    """Physical names of the six bucket tables, in canonical order."""
    names = bucket_names(buckets)
    resolved = resolve_prefix(prefix)
    return [resolved + names.table_for(bucket) for bucket in CANONICAL_BUCKETS]


def build_context(dialect: Optional[str], prefix: Optional[str], buckets: BucketNames) -> Dict[str, str]:
    """
    Template context for a dialect, prefix and bucket aliases.

    ``dialect=None`` leaves ``{{id_column}}`` unresolved; the drop statements
    do not use it.
    """
    context = buckets.as_context()
    context["prefix"] = resolve_prefix(prefix)
    if dialect is not None:
        try:
            context["id_column"] = ID_COLUMNS[dialect]
        except KeyError:
            raise ConfigurationError(f"Unsupported SQL dialect for schema creation: {dialect}") from None
    return context


async def execute_statements(engine: AsyncEngine, statements: List[str], context: Dict[str, str]) -> None:
    """
    Run statements one at a time, committing after each.

    The first failing statement stops the sequence; earlier statements stay
    committed.

    Raises:
        StorageError: If a statement fails
    """
    sql = None
    try:
        async with engine.connect() as conn:
            for number, template in enumerate(statements, start=1):
                sql = render_statement(template, context)
                logger.debug("Schema statement %d/%d: %s", number, len(statements), sql)
                await conn.execute(text(sql))
                await conn.commit()
    except SQLAlchemyError as e:
        logger.error("Schema statement failed: %s", sql)
        raise StorageError(f"Schema statement failed: {e}", errors=[e]) from e


async def create_tables(
    engine: AsyncEngine,
    prefix: Optional[str] = None,
    buckets: Union[BucketNames, Dict[str, Any], None] = None,
) -> AsyncEngine:
    """
    Drop and recreate the six bucket tables.

    Args:
        engine: Database engine
        prefix: Table-name prefix (default ``"acl_"``)
        buckets: Bucket aliases

    Returns:
        The engine, for chaining

    Example:
        ```python
        engine = create_async_engine("postgresql+psycopg://acl@localhost/acl")
        await create_tables(engine, prefix="app_")
        ```
    """
    context = build_context(engine.dialect.name, prefix, bucket_names(buckets))
    logger.info("Creating ACL tables with prefix %r", context["prefix"])
    await execute_statements(engine, DOWN_SQL + UP_SQL, context)
    return engine


async def drop_tables(
    engine: AsyncEngine,
    prefix: Optional[str] = None,
    buckets: Union[BucketNames, Dict[str, Any], None] = None,
) -> AsyncEngine:
    """Drop the six bucket tables if they exist."""
    context = build_context(None, prefix, bucket_names(buckets))
    logger.info("Dropping ACL tables with prefix %r", context["prefix"])
    await execute_statements(engine, DOWN_SQL, context)
    return engine

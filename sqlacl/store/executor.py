"""
Command executor.

Interprets one transaction command as a read-modify-write against the
bucket's table. All reads and writes of a command go through the connection
passed in, so the caller decides the database transaction boundary.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from sqlalchemy import column, delete, insert, select, table, update
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql.expression import TableClause

from ..exceptions import StorageError
from .buckets import BucketDescriptor
from .models import AddCommand, DeleteCommand, RemoveCommand

logger = logging.getLogger(__name__)

AnyCommand = Union[AddCommand, DeleteCommand, RemoveCommand]


def acl_table(name: str) -> TableClause:
    """Lightweight table construct with the two columns the store touches."""
    return table(name, column("id"), column("acl_key"), column("acl_value"))


def union_values(*groups: Iterable[Any]) -> List[Any]:
    """
    Ordered union of value groups.

    Duplicates are dropped, keeping the first occurrence.

    >>> union_values(["a", "b"], ["b", "c"])
    ['a', 'b', 'c']
    """
    merged: Dict[Any, None] = {}
    for group in groups:
        for value in group:
            merged.setdefault(value, None)
    return list(merged)


def difference_values(values: Iterable[Any], removed: Iterable[Any]) -> List[Any]:
    removed = set(removed)
    return [value for value in values if value not in removed]


def _check_elements(values: List[Any], table_name: str) -> List[Any]:
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise StorageError(f"Unsupported set element in {table_name}: {value!r}")
    return values


def decode_set(raw: Optional[str], table_name: str) -> List[Any]:
    """Parse a set-bucket value. Empty or missing values decode to ``[]``."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError as e:
        raise StorageError(f"Malformed JSON in {table_name}: {e}") from e
    if not isinstance(value, list):
        raise StorageError(f"Expected a JSON array in {table_name}, got {type(value).__name__}")
    return _check_elements(value, table_name)


def decode_map(raw: Optional[str], table_name: str) -> Dict[str, List[Any]]:
    """
    Parse a permission-bucket value. Empty or missing values decode to ``{}``.

    Every sub-key must map to an array of strings or numbers.
    """
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError as e:
        raise StorageError(f"Malformed JSON in {table_name}: {e}") from e
    if not isinstance(value, dict):
        raise StorageError(f"Expected a JSON object in {table_name}, got {type(value).__name__}")
    for sub_key, values in value.items():
        if not isinstance(values, list):
            raise StorageError(f"Expected a JSON array for {sub_key!r} in {table_name}, got {type(values).__name__}")
        _check_elements(values, table_name)
    return value


def encode(value: Any) -> str:
    return json.dumps(value)


async def fetch_value(conn: AsyncConnection, table_name: str, row_key: str) -> Optional[str]:
    """Return ``acl_value`` of the first row with ``acl_key == row_key``."""
    t = acl_table(table_name)
    result = await conn.execute(select(t.c.acl_value).where(t.c.acl_key == row_key))
    row = result.first()
    return None if row is None else row[0]


async def fetch_rows(conn: AsyncConnection, table_name: str, row_keys: List[str]) -> List[Tuple[str, str]]:
    """Return ``(acl_key, acl_value)`` of every row whose key is in ``row_keys``, in id order."""
    if not row_keys:
        return []
    t = acl_table(table_name)
    result = await conn.execute(
        select(t.c.acl_key, t.c.acl_value).where(t.c.acl_key.in_(row_keys)).order_by(t.c.id)
    )
    return [(row[0], row[1]) for row in result]


async def _write(conn: AsyncConnection, table_name: str, row_key: str, value: Any, exists: bool) -> None:
    t = acl_table(table_name)
    if exists:
        await conn.execute(update(t).where(t.c.acl_key == row_key).values(acl_value=encode(value)))
    else:
        await conn.execute(insert(t).values(acl_key=row_key, acl_value=encode(value)))


async def _delete_rows(conn: AsyncConnection, table_name: str, row_keys: List[str]) -> None:
    t = acl_table(table_name)
    await conn.execute(delete(t).where(t.c.acl_key.in_(row_keys)))


async def _add(conn: AsyncConnection, bucket: BucketDescriptor, command: AddCommand) -> None:
    if not command.values:
        return
    row_key = bucket.row_key(command.key)
    raw = await fetch_value(conn, bucket.table, row_key)

    if bucket.is_permission:
        acl = decode_map(raw, bucket.table)
        sub_key = str(command.key)
        acl[sub_key] = union_values(acl.get(sub_key, []), command.values)
        await _write(conn, bucket.table, row_key, acl, exists=raw is not None)
    else:
        merged = union_values(decode_set(raw, bucket.table), command.values)
        await _write(conn, bucket.table, row_key, merged, exists=raw is not None)


async def _delete(conn: AsyncConnection, bucket: BucketDescriptor, command: DeleteCommand) -> None:
    if not command.keys:
        return

    if not bucket.is_permission:
        await _delete_rows(conn, bucket.table, bucket.row_keys(command.keys))
        return

    row_key = bucket.row_key()
    raw = await fetch_value(conn, bucket.table, row_key)
    if raw is None:
        return
    acl = decode_map(raw, bucket.table)
    for key in command.keys:
        acl.pop(str(key), None)

    if acl:
        await _write(conn, bucket.table, row_key, acl, exists=True)
    else:
        await _delete_rows(conn, bucket.table, [row_key])


async def _remove(conn: AsyncConnection, bucket: BucketDescriptor, command: RemoveCommand) -> None:
    row_key = bucket.row_key(command.key)
    raw = await fetch_value(conn, bucket.table, row_key)
    if raw is None:
        return

    if not bucket.is_permission:
        remaining = difference_values(decode_set(raw, bucket.table), command.values)
        if remaining:
            await _write(conn, bucket.table, row_key, remaining, exists=True)
        else:
            await _delete_rows(conn, bucket.table, [row_key])
        return

    acl = decode_map(raw, bucket.table)
    sub_key = str(command.key)
    if sub_key not in acl:
        return

    # Emptied sub-keys are dropped, an emptied map drops the row.
    remaining = difference_values(acl[sub_key], command.values)
    if remaining:
        acl[sub_key] = remaining
    else:
        del acl[sub_key]

    if acl:
        await _write(conn, bucket.table, row_key, acl, exists=True)
    else:
        await _delete_rows(conn, bucket.table, [row_key])


_HANDLERS = {
    "add": _add,
    "delete": _delete,
    "remove": _remove,
}


async def execute_command(conn: AsyncConnection, bucket: BucketDescriptor, command: AnyCommand) -> None:
    """
    Apply a single command.

    Args:
        conn: Open connection; the caller owns commit/rollback
        bucket: Descriptor of ``command.bucket``
        command: Command to apply

    Raises:
        StorageError: If a stored value cannot be decoded
        sqlalchemy.exc.SQLAlchemyError: If a statement fails
    """
    logger.debug("Executing %s on %s (%s)", command.kind, bucket.name, bucket.table)
    await _HANDLERS[command.kind](conn, bucket, command)

"""
Bucket store backed by a relational database.

Implements the storage contract an ACL engine expects: ``setup``,
``teardown``, ``begin``, ``end``, ``clean``, ``get``, ``union``, ``add``,
``delete`` and ``remove``.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from ..exceptions import ContractViolation, StorageError
from ..schema.manager import create_tables, drop_tables, resolve_prefix
from ..utils.contract import Keys, Scalar, Values, as_list, contract
from ..utils.database import create_engine_from_config
from . import executor
from .buckets import BucketDescriptor, BucketNames, bucket_names, classify
from .models import AddCommand, DeleteCommand, RemoveCommand, Transaction

logger = logging.getLogger(__name__)


class AclStore:
    """
    Storage backend for ACL rule data.

    Set buckets (``users``, ``roles``, ``resources``, ``parents``, ...) keep
    one row per key holding a JSON array. Buckets whose name contains
    ``"allows"`` are permission buckets: one row per bucket name in the
    permissions table, holding a JSON object from resource to permissions.

    Reads run immediately. Writes are recorded into a ``Transaction`` and run
    in order when the transaction is ended.

    Example:
        ```python
        store = AclStore(engine, prefix="acl_")
        await store.setup()

        tx = store.begin()
        store.add(tx, "users", "joed", ["admin"])
        store.add(tx, "roles_allows_admin", "blogs", ["read", "write"])
        await store.end(tx)

        await store.get("users", "joed")                  # ["admin"]
        await store.get("roles_allows_admin", "blogs")    # ["read", "write"]
        ```
    """

    def __init__(
        self,
        engine: AsyncEngine,
        prefix: Optional[str] = None,
        buckets: Union[BucketNames, Dict[str, Any], None] = None,
        owns_engine: bool = False,
    ) -> None:
        """
        Initialize the store.

        Args:
            engine: Database engine shared by all operations
            prefix: Table-name prefix used by every operation (default ``"acl_"``)
            buckets: Bucket aliases
            owns_engine: Dispose the engine on ``close()``
        """
        if not isinstance(engine, AsyncEngine):
            raise ContractViolation("AclStore", f"engine must be an AsyncEngine, got {type(engine).__name__}")

        self.engine = engine
        self.prefix = resolve_prefix(prefix)
        self.buckets = bucket_names(buckets)
        self._owns_engine = owns_engine

    @classmethod
    def from_config(cls, config=None, **kwargs) -> "AclStore":
        """
        Create a store and its engine from configuration.

        Args:
            config: AclConfig (loaded from the environment when omitted)
            **kwargs: Configuration overrides used when loading

        Returns:
            AclStore owning its engine
        """
        if config is None:
            from ..config import load_config

            config = load_config(**kwargs)

        engine = create_engine_from_config(config)
        return cls(engine, prefix=config.prefix, buckets=config.buckets, owns_engine=True)

    def bucket(self, name: str) -> BucketDescriptor:
        return classify(name, self.prefix, self.buckets)

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    async def setup(self) -> None:
        """Create (or recreate) the bucket tables."""
        await create_tables(self.engine, self.prefix, self.buckets)

    async def teardown(self) -> None:
        """Drop the bucket tables."""
        await drop_tables(self.engine, self.prefix, self.buckets)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin(self) -> Transaction:
        """Begin a transaction. No I/O happens until ``end``."""
        return Transaction()

    @contract
    async def end(self, transaction: Transaction) -> None:
        """
        Execute a transaction.

        Commands run in the order they were added, each in its own database
        transaction and each finishing before the next starts. A failing
        command does not stop the ones after it.

        Args:
            transaction: Transaction returned by ``begin``

        Raises:
            ContractViolation: If ``transaction`` is not a Transaction
            StorageError: If any command failed; carries the last failure as
                its cause and every failure in ``errors``
        """
        errors: List[BaseException] = []
        for command in transaction.commands:
            try:
                await self._execute(command)
            except (SQLAlchemyError, StorageError) as e:
                logger.warning("ACL %s on %r failed: %s", command.kind, command.bucket, e)
                errors.append(e)

        if errors:
            raise StorageError(
                f"{len(errors)} of {len(transaction.commands)} commands failed: {errors[-1]}",
                errors=errors,
            ) from errors[-1]

    async def _execute(self, command: Union[AddCommand, DeleteCommand, RemoveCommand]) -> None:
        descriptor = self.bucket(command.bucket)
        async with self.engine.begin() as conn:
            await executor.execute_command(conn, descriptor, command)

    @contract
    def add(self, transaction: Transaction, bucket: str, key: Scalar, values: Values) -> None:
        """
        Add values to a key.

        Args:
            transaction: Transaction to record into
            bucket: Bucket name
            key: Key inside the bucket (a resource for permission buckets)
            values: Value or list of values
        """
        transaction.append(AddCommand(bucket=bucket, key=key, values=as_list(values)))

    @contract
    def delete(self, transaction: Transaction, bucket: str, keys: Keys) -> None:
        """Delete one key or a list of keys from a bucket."""
        transaction.append(DeleteCommand(bucket=bucket, keys=as_list(keys)))

    @contract
    def remove(self, transaction: Transaction, bucket: str, key: Scalar, values: Values) -> None:
        """Remove values from a key. A key left without values is deleted."""
        transaction.append(RemoveCommand(bucket=bucket, key=key, values=as_list(values)))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @contract
    async def clean(self) -> None:
        """Clean the storage. Nothing to do for this backend."""
        return None

    @contract
    async def get(self, bucket: str, key: Scalar) -> List[Any]:
        """
        Get the values stored at a bucket's key.

        Args:
            bucket: Bucket name
            key: Key inside the bucket

        Returns:
            List of values, empty when the key does not exist

        Raises:
            StorageError: If the query fails or the row is malformed
        """
        descriptor = self.bucket(bucket)
        try:
            async with self.engine.connect() as conn:
                raw = await executor.fetch_value(conn, descriptor.table, descriptor.row_key(key))
        except SQLAlchemyError as e:
            raise StorageError(f"get {bucket!r} failed: {e}", errors=[e]) from e

        if descriptor.is_permission:
            return list(executor.decode_map(raw, descriptor.table).get(str(key), []))
        return executor.decode_set(raw, descriptor.table)

    @contract
    async def union(self, bucket: str, keys: List[Scalar]) -> List[Any]:
        """
        Return the union of the values stored at several keys.

        Values keep the order of their first occurrence, walking ``keys`` in
        order.

        Args:
            bucket: Bucket name
            keys: Keys inside the bucket

        Returns:
            List of distinct values

        Raises:
            StorageError: If the query fails or a row is malformed
        """
        descriptor = self.bucket(bucket)
        try:
            async with self.engine.connect() as conn:
                if descriptor.is_permission:
                    raw = await executor.fetch_value(conn, descriptor.table, descriptor.row_key())
                    rows = []
                else:
                    raw = None
                    rows = await executor.fetch_rows(conn, descriptor.table, descriptor.row_keys(keys))
        except SQLAlchemyError as e:
            raise StorageError(f"union {bucket!r} failed: {e}", errors=[e]) from e

        if descriptor.is_permission:
            acl = executor.decode_map(raw, descriptor.table)
            return executor.union_values(*(acl.get(str(key), []) for key in keys))

        position: Dict[str, int] = {}
        for index, row_key in enumerate(descriptor.row_keys(keys)):
            position.setdefault(row_key, index)
        rows.sort(key=lambda row: position.get(row[0], len(position)))
        return executor.union_values(*(executor.decode_set(value, descriptor.table) for _, value in rows))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Dispose the engine if this store created it."""
        if self._owns_engine:
            await self.engine.dispose()

    async def __aenter__(self) -> "AclStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

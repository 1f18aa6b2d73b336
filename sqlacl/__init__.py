"""
sqlacl - Relational storage backend for ACL rule data.

Stores users, roles, resources, parents and permission grants in six SQL
tables and exposes the bucket-oriented contract an ACL engine consumes.

Example:
    ```python
    from sqlacl import AclStore

    store = AclStore.from_config(db_name="acl", username="postgres")
    await store.setup()

    tx = store.begin()
    store.add(tx, "users", "joed", ["admin"])
    store.add(tx, "roles_allows_admin", "blogs", ["read", "write"])
    await store.end(tx)

    roles = await store.get("users", "joed")
    permissions = await store.union("roles_allows_admin", ["blogs", "forums"])

    await store.close()
    ```
"""

from .config import AclConfig, load_config
from .exceptions import ConfigurationError, ContractViolation, SqlAclError, StorageError
from .schema import create_tables, drop_tables, table_names
from .store import (
    AclStore,
    AddCommand,
    BucketDescriptor,
    BucketKind,
    BucketNames,
    DeleteCommand,
    RemoveCommand,
    Transaction,
    classify,
)
from .utils.database import create_engine_from_args, create_engine_from_config

__version__ = "0.1.0"

__all__ = [
    # Main store
    "AclStore",
    "AclConfig",
    "load_config",
    # Buckets
    "BucketNames",
    "BucketKind",
    "BucketDescriptor",
    "classify",
    # Transactions
    "Transaction",
    "AddCommand",
    "DeleteCommand",
    "RemoveCommand",
    # Schema
    "create_tables",
    "drop_tables",
    "table_names",
    # Connections
    "create_engine_from_args",
    "create_engine_from_config",
    # Errors
    "SqlAclError",
    "ContractViolation",
    "StorageError",
    "ConfigurationError",
]

"""
Bucket names and classification.

The ACL engine addresses data by bucket name. A name either refers to one of
six canonical buckets (which may be aliased to other table names) or, when it
contains the permission marker, to a permission row stored in the shared
permissions table.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

PERMISSION_MARKER = "allows"

CANONICAL_BUCKETS = ("meta", "resources", "parents", "roles", "users", "permissions")


class BucketNames(BaseModel):
    """
    Table-name suffixes for the six canonical buckets.

    Each field defaults to the bucket's own name. Override a field to store
    that bucket under a different table name.

    Example:
        ```python
        names = BucketNames(users="members")
        names.table_for("users")   # "members"
        names.table_for("custom")  # "custom"
        ```
    """

    meta: str = Field(default="meta", min_length=1)
    resources: str = Field(default="resources", min_length=1)
    parents: str = Field(default="parents", min_length=1)
    roles: str = Field(default="roles", min_length=1)
    users: str = Field(default="users", min_length=1)
    permissions: str = Field(default="permissions", min_length=1)

    model_config = {"frozen": True, "extra": "forbid"}

    def table_for(self, bucket: str) -> str:
        """Return the alias for a canonical bucket, or the name unchanged."""
        if bucket in CANONICAL_BUCKETS:
            return getattr(self, bucket)
        return bucket

    def as_context(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in CANONICAL_BUCKETS}


def bucket_names(options: Union[BucketNames, Dict[str, Any], None] = None) -> BucketNames:
    """Build ``BucketNames`` from an instance, a mapping or ``None``."""
    if options is None:
        return BucketNames()
    if isinstance(options, BucketNames):
        return options
    return BucketNames(**options)


class BucketKind(str, Enum):
    """Record shape stored for a bucket."""

    SET = "set"
    PERMISSION = "permission"


@dataclass(frozen=True)
class BucketDescriptor:
    """
    Where and how a bucket is stored.

    Attributes:
        name: Bucket name as given by the caller
        kind: Record shape
        table: Physical table name, prefix included
    """

    name: str
    kind: BucketKind
    table: str

    @property
    def is_permission(self) -> bool:
        return self.kind is BucketKind.PERMISSION

    def row_key(self, key: Optional[Any] = None) -> str:
        """
        Value of ``acl_key`` holding ``key``.

        Permission buckets keep a single row keyed by the bucket name, so the
        argument is ignored for them.
        """
        if self.is_permission:
            return self.name
        return str(key)

    def row_keys(self, keys: List[Any]) -> List[str]:
        return [str(key) for key in keys]


def classify(bucket: str, prefix: str, names: BucketNames) -> BucketDescriptor:
    """
    Resolve a bucket name to its descriptor.

    Args:
        bucket: Bucket name, e.g. ``"users"`` or ``"roles_allows_admin"``
        prefix: Table-name prefix
        names: Bucket aliases

    Returns:
        BucketDescriptor

    Example:
        >>> classify("roles_allows_admin", "acl_", BucketNames()).table
        'acl_permissions'
        >>> classify("users", "acl_", BucketNames(users="members")).table
        'acl_members'
    """
    if PERMISSION_MARKER in bucket:
        return BucketDescriptor(
            name=bucket,
            kind=BucketKind.PERMISSION,
            table=prefix + names.permissions,
        )
    return BucketDescriptor(name=bucket, kind=BucketKind.SET, table=prefix + names.table_for(bucket))

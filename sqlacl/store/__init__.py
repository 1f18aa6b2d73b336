"""
sqlacl store module.

Bucket store, bucket classification and transaction commands.
"""

from .buckets import BucketDescriptor, BucketKind, BucketNames, classify
from .models import AddCommand, Command, DeleteCommand, RemoveCommand, Transaction
from .store import AclStore

__all__ = [
    # Store
    "AclStore",
    # Buckets
    "BucketDescriptor",
    "BucketKind",
    "BucketNames",
    "classify",
    # Transactions
    "Transaction",
    "Command",
    "AddCommand",
    "DeleteCommand",
    "RemoveCommand",
]

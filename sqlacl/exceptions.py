"""
Exceptions raised by sqlacl.

Contract violations are programming errors in the caller and are raised
immediately. Storage errors come from the database or from malformed rows
and are raised from the awaited operation.
"""

from typing import List, Optional


class SqlAclError(Exception):
    """Base class for all sqlacl errors."""


class ContractViolation(SqlAclError, TypeError):
    """Raised when an operation is called with arguments of the wrong type."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Broke parameter contract of {operation}: {detail}")


class ConfigurationError(SqlAclError, ValueError):
    """Raised when a connection or schema cannot be configured."""


class StorageError(SqlAclError):
    """
    Raised when a database round trip or a stored value fails.

    Attributes:
        errors: Every failure collected while running a transaction. For a
            single failing operation this holds just that error.
    """

    def __init__(self, message: str, errors: Optional[List[BaseException]] = None) -> None:
        super().__init__(message)
        self.errors: List[BaseException] = list(errors or [])

"""
sqlacl schema module.

Creates and drops the tables backing the bucket store.
"""

from .manager import DEFAULT_PREFIX, create_tables, drop_tables, render_statement, table_names

__all__ = [
    "DEFAULT_PREFIX",
    "create_tables",
    "drop_tables",
    "render_statement",
    "table_names",
]

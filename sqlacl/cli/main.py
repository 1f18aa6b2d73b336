"""
sqlacl CLI - Manage the relational ACL storage.

Usage:
    sqlacl setup            Create the ACL tables
    sqlacl teardown         Drop the ACL tables
    sqlacl tables           Show bucket to table mapping
    sqlacl get              Show the values at a bucket's key
    sqlacl union            Show the union of values at several keys
"""

import logging

import typer
from rich.logging import RichHandler

from .commands import buckets, schema

# Create the main Typer app
app = typer.Typer(
    name="sqlacl",
    help="Relational storage backend for ACL rule data",
    add_completion=False,
)

app.command(name="setup")(schema.setup_command)
app.command(name="teardown")(schema.teardown_command)
app.command(name="tables")(schema.tables_command)
app.command(name="get")(buckets.get_command)
app.command(name="union")(buckets.union_command)


@app.callback()
def callback(
    debug: bool = typer.Option(False, "--debug", envvar="ACL_DEBUG", help="Enable debug logging"),
) -> None:
    """
    sqlacl - store ACL users, roles, resources and permissions in SQL.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

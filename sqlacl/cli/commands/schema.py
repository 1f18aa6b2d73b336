"""
sqlacl setup/teardown commands - Manage the ACL tables.

Creates or drops the bucket tables in the configured database.
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ...config import AclConfig, load_config
from ...exceptions import SqlAclError
from ...schema.manager import table_names
from ...store import AclStore
from ...store.buckets import CANONICAL_BUCKETS

console = Console()


def load_cli_config(prefix: Optional[str]) -> AclConfig:
    """Load configuration, applying a ``--prefix`` override through the validators."""
    overrides = {} if prefix is None else {"prefix": prefix}
    try:
        return load_config(**overrides)
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/red] {e}")
        raise typer.Exit(1)


def setup_command(
    prefix: Optional[str] = typer.Option(
        None,
        "--prefix",
        "-p",
        help="Table-name prefix (default: ACL_PREFIX or acl_)",
    ),
) -> None:
    """
    Create the ACL tables, dropping existing ones first.

    Example:
        $ sqlacl setup
        $ sqlacl setup --prefix app_acl_
    """
    console.print("\n[bold cyan]ACL Setup[/bold cyan]\n")

    config = load_cli_config(prefix)
    asyncio.run(_run(config, teardown=False))


def teardown_command(
    prefix: Optional[str] = typer.Option(
        None,
        "--prefix",
        "-p",
        help="Table-name prefix (default: ACL_PREFIX or acl_)",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """
    Drop the ACL tables.

    Example:
        $ sqlacl teardown --yes
    """
    console.print("\n[bold cyan]ACL Teardown[/bold cyan]\n")

    config = load_cli_config(prefix)
    if not yes and not typer.confirm(f"Drop all ACL tables with prefix {config.prefix!r}?"):
        console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(0)

    asyncio.run(_run(config, teardown=True))


async def _run(config: AclConfig, teardown: bool) -> None:
    """Internal function to create or drop the tables."""
    try:
        async with AclStore.from_config(config) as store:
            if teardown:
                await store.teardown()
            else:
                await store.setup()
    except SqlAclError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    action = "Dropped" if teardown else "Created"
    for name in table_names(config.prefix, config.buckets):
        console.print(f"[green]✓[/green] {action} {name}")
    console.print()


def tables_command(
    prefix: Optional[str] = typer.Option(
        None,
        "--prefix",
        "-p",
        help="Table-name prefix (default: ACL_PREFIX or acl_)",
    ),
) -> None:
    """
    Show the table each canonical bucket is stored in.

    Example:
        $ sqlacl tables
    """
    config = load_cli_config(prefix)

    table = Table(title="ACL Tables")
    table.add_column("Bucket", style="cyan")
    table.add_column("Table", style="green")

    for bucket in CANONICAL_BUCKETS:
        table.add_row(bucket, config.prefix + config.buckets.table_for(bucket))

    console.print(table)

"""
sqlacl get/union commands - Inspect stored ACL data.
"""

import asyncio
import json
from typing import Any, List, Optional

import typer
from rich.console import Console

from ...config import AclConfig
from ...exceptions import SqlAclError
from ...store import AclStore
from .schema import load_cli_config

console = Console()


def get_command(
    bucket: str = typer.Argument(..., help="Bucket name (e.g. users, roles_allows_admin)"),
    key: str = typer.Argument(..., help="Key inside the bucket"),
    prefix: Optional[str] = typer.Option(None, "--prefix", "-p", help="Table-name prefix"),
) -> None:
    """
    Print the values stored at a bucket's key.

    Example:
        $ sqlacl get users joed
        $ sqlacl get roles_allows_admin blogs
    """
    config = load_cli_config(prefix)
    values = asyncio.run(_read(config, lambda store: store.get(bucket, key)))
    _print(values)


def union_command(
    bucket: str = typer.Argument(..., help="Bucket name"),
    keys: List[str] = typer.Argument(..., help="Keys inside the bucket"),
    prefix: Optional[str] = typer.Option(None, "--prefix", "-p", help="Table-name prefix"),
) -> None:
    """
    Print the union of the values stored at several keys.

    Example:
        $ sqlacl union users joed jsmith
    """
    config = load_cli_config(prefix)
    values = asyncio.run(_read(config, lambda store: store.union(bucket, list(keys))))
    _print(values)


async def _read(config: AclConfig, operation) -> List[Any]:
    try:
        async with AclStore.from_config(config) as store:
            return await operation(store)
    except SqlAclError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _print(values: List[Any]) -> None:
    if not values:
        console.print("[yellow]No values found[/yellow]")
        return
    console.print_json(json.dumps(values))

"""
Transaction models.

A transaction is an ordered list of mutation commands. Commands are plain
values: they can be inspected, serialised and replayed independently of the
store that recorded them.
"""

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field

Value = Union[str, int, float]


class AddCommand(BaseModel):
    """Union ``values`` into the set stored at ``bucket``/``key``."""

    kind: Literal["add"] = "add"
    bucket: str
    key: Value
    values: List[Value] = Field(default_factory=list)

    model_config = {"frozen": True}


class DeleteCommand(BaseModel):
    """Delete ``keys`` from ``bucket``."""

    kind: Literal["delete"] = "delete"
    bucket: str
    keys: List[Value] = Field(default_factory=list)

    model_config = {"frozen": True}


class RemoveCommand(BaseModel):
    """Remove ``values`` from the set stored at ``bucket``/``key``."""

    kind: Literal["remove"] = "remove"
    bucket: str
    key: Value
    values: List[Value] = Field(default_factory=list)

    model_config = {"frozen": True}


Command = Annotated[
    Union[AddCommand, DeleteCommand, RemoveCommand],
    Field(discriminator="kind"),
]


class Transaction(BaseModel):
    """
    Ordered list of pending commands.

    Created by ``AclStore.begin()``, filled by ``add``/``delete``/``remove``
    and executed by ``AclStore.end()``. Nothing touches the database until
    ``end`` is awaited.

    Example:
        ```python
        tx = store.begin()
        store.add(tx, "users", "joed", ["admin"])
        store.remove(tx, "users", "joed", "guest")
        len(tx.commands)  # 2
        await store.end(tx)
        ```
    """

    commands: List[Command] = Field(default_factory=list)

    def append(self, command: Union[AddCommand, DeleteCommand, RemoveCommand]) -> None:
        self.commands.append(command)

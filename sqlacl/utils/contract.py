"""
Parameter contracts for the public store operations.

Wraps ``pydantic.validate_call`` in strict mode so a wrong argument type is
reported as a ``ContractViolation`` before the operation does any work.
Values are never coerced: ``"1"`` is not an ``int`` and ``True`` is not a
number.
"""

import functools
import inspect
from typing import Any, Callable, List, TypeVar, Union

from pydantic import ConfigDict, ValidationError, validate_call

from ..exceptions import ContractViolation

F = TypeVar("F", bound=Callable[..., Any])

# A single key or value.
Scalar = Union[str, int, float]

# One value or a homogeneous list of values.
Values = Union[str, int, float, List[str], List[int], List[float]]

# One key or a list of keys.
Keys = Union[str, int, float, List[Union[str, int, float]]]

_CONTRACT_CONFIG = ConfigDict(strict=True, arbitrary_types_allowed=True)


def _describe(exc: ValidationError, names: List[str]) -> str:
    parts = []
    for error in exc.errors():
        loc = list(error["loc"])
        # Positional arguments are reported by index
        if loc and isinstance(loc[0], int) and loc[0] < len(names):
            loc[0] = names[loc[0]]
        location = ".".join(str(part) for part in loc)
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def _argument_checker(func: Callable[..., Any], signature: inspect.Signature) -> Callable[..., None]:
    """
    Synchronous stand-in with the signature of ``func``.

    Validating against the stand-in keeps the check at call time even when
    ``func`` is a coroutine function.
    """

    def check(*args: Any, **kwargs: Any) -> None:
        return None

    check.__signature__ = signature.replace(return_annotation=inspect.Signature.empty)  # type: ignore[attr-defined]
    check.__annotations__ = {
        name: annotation for name, annotation in func.__annotations__.items() if name != "return"
    }
    check.__name__ = func.__name__
    check.__qualname__ = func.__qualname__
    return check


def contract(func: F) -> F:
    """
    Enforce the annotated parameter types of ``func``.

    Works for plain functions, methods and coroutine functions. For coroutine
    functions the check happens when the function is called, not when the
    coroutine is awaited.

    Example:
        ```python
        @contract
        def get(bucket: str, key: Scalar) -> None:
            ...

        get("users", ["not", "a", "key"])  # raises ContractViolation
        ```
    """
    signature = inspect.signature(func)
    names = list(signature.parameters)
    validator = validate_call(config=_CONTRACT_CONFIG)(_argument_checker(func, signature))

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            validator(*args, **kwargs)
        except ValidationError as exc:
            raise ContractViolation(func.__qualname__, _describe(exc, names)) from exc
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def as_list(value: Any) -> List[Any]:
    """Normalise a scalar or list argument to a new list."""
    if isinstance(value, list):
        return list(value)
    return [value]

from __future__ import annotations

import warnings
from collections.abc import (
    Awaitable,
    Callable,
    Iterable,
    Iterator,
    Mapping,
    MutableSet,
    Sequence,
)
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Final,
    Generic,
    NamedTuple,
    ParamSpec,
    Protocol,
    TypeVar,
    runtime_checkable,
)

from typing_extensions import Self

from respact.config import Config

_runtime_checks = False
_beartype_found = False

try:
    import beartype

    _beartype_found = True
except ImportError:  # pragma: no cover
    pass

if Config.runtime_checks and not TYPE_CHECKING:  # pragma: no cover
    if _beartype_found:
        _runtime_checks = True
    else:
        warnings.warn(
            "Runtime checks were enabled via environment variable RESPACT_RUNTIME_CHECKS"
            " but could not import beartype"
        )

RUNTIME_TYPECHECKS = _runtime_checks

P = ParamSpec("P")
R = TypeVar("R")


def safe_beartype(func: Callable[P, R]) -> Callable[P, R]:
    if TYPE_CHECKING:
        return func

    return beartype.beartype(func) if _beartype_found else func


def add_runtime_checks(func: Callable[P, R]) -> Callable[P, R]:
    if RUNTIME_TYPECHECKS and not TYPE_CHECKING:
        return safe_beartype(func)

    return func


#: Represents the different python primitives that are accepted
#: as input parameters for commands that can be used with loosely
#: defined types. These are encoded using the configured encoding
#: before being transmitted.
ValueT = str | bytes | int | float

#: The canonical type used for input parameters that represent "strings"
#: that are transmitted to redis.
StringT = str | bytes

#: Mapping of primitives returned by redis
ResponsePrimitive = StringT | int | float | bool | None

#: Represents the total structure of any response for a redis
#: command. Error replies are mapped to exceptions.
if TYPE_CHECKING:
    ResponseType = (
        ResponsePrimitive
        | list["ResponseType"]
        | MutableSet[ResponsePrimitive | tuple[ResponsePrimitive, ...]]
        | dict[ResponsePrimitive | tuple[ResponsePrimitive, ...], "ResponseType"]
        | BaseException
    )
else:
    ResponseType = (
        ResponsePrimitive
        | list[Any]
        | MutableSet[ResponsePrimitive | tuple[ResponsePrimitive, ...]]
        | dict[ResponsePrimitive | tuple[ResponsePrimitive, ...], Any]
        | BaseException
    )

__all__ = [
    "Any",
    "Awaitable",
    "Callable",
    "ClassVar",
    "Final",
    "Generic",
    "Iterable",
    "Iterator",
    "Mapping",
    "MutableSet",
    "NamedTuple",
    "ParamSpec",
    "R",
    "Protocol",
    "ResponsePrimitive",
    "ResponseType",
    "runtime_checkable",
    "Self",
    "Sequence",
    "StringT",
    "TypeVar",
    "ValueT",
    "TYPE_CHECKING",
    "RUNTIME_TYPECHECKS",
]

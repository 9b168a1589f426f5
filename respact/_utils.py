from __future__ import annotations

from respact.exceptions import DataError
from respact.typing import Any, Iterable, Iterator, Mapping, ResponseType

#: Argument types that are transmitted as a single bulk string
SCALAR_TYPES = (str, bytes, bytearray, memoryview, int, float, type(None))


def b(x: ResponseType, encoding: str | None = None) -> bytes:
    if isinstance(x, bytes):
        return x
    if not isinstance(x, str):
        _v = str(x)
    else:
        _v = x
    return _v.encode(encoding) if encoding else _v.encode()


def nativestr(x: ResponseType, encoding: str = "utf-8") -> str:
    if isinstance(x, (str, bytes)):
        return x if isinstance(x, str) else x.decode(encoding, "replace")
    elif isinstance(x, (int, float, bool)):
        return str(x)
    raise ValueError(f"Unable to cast {x} to string")


def flatten_arguments(arguments: Iterable[Any]) -> Iterator[Any]:
    """
    Flatten heterogeneous command arguments into the sequence of
    scalars that will each be sent as one bulk string.

    Mappings expand to alternating keys & values and any other
    iterable expands element wise (recursively)::

        list(flatten_arguments(["a", {"b": 1}, (2, [3.0])]))
        # ["a", "b", 1, 2, 3.0]
    """
    for argument in arguments:
        if isinstance(argument, SCALAR_TYPES):
            yield argument
        elif isinstance(argument, Mapping):
            for key, value in argument.items():
                yield from flatten_arguments((key, value))
        elif isinstance(argument, Iterable):
            yield from flatten_arguments(argument)
        else:
            raise DataError(
                f"Invalid input of type: {type(argument).__name__!r}. "
                "Convert to a bytes, string, int or float first."
            )


def freeze_arguments(arguments: Iterable[Any]) -> tuple[Any, ...]:
    """
    Snapshot arguments for :func:`flatten_arguments` so that one-shot
    iterables (generators, iterators) survive being flattened any number
    of times. Mappings are captured as key/value pairs. Values that can't
    be flattened are kept as is and rejected when flattened.
    """
    frozen: list[Any] = []
    for argument in arguments:
        if isinstance(argument, SCALAR_TYPES):
            frozen.append(argument)
        elif isinstance(argument, Mapping):
            frozen.append(tuple(freeze_arguments(item) for item in argument.items()))
        elif isinstance(argument, Iterable):
            frozen.append(freeze_arguments(argument))
        else:
            frozen.append(argument)
    return tuple(frozen)

from __future__ import annotations

from deprecated.sphinx import versionadded

from respact._protocols import Connection
from respact.typing import Any, Awaitable, Callable, StringT, add_runtime_checks


class ScopedConnectionAction:
    __slots__ = ("key", "callback")

    def __init__(
        self, key: StringT | None, callback: Callable[[Connection], Awaitable[Any]]
    ) -> None:
        self.key = key
        self.callback = callback

    def keys(self) -> list[StringT]:
        return [self.key] if self.key is not None else []

    async def perform(self, connection: Connection) -> None:
        await self.callback(connection)

    def __repr__(self) -> str:
        return f"{type(self).__name__}<key={self.key!r}>"


@versionadded(version="0.3.0")
@add_runtime_checks
def with_connection(
    key: StringT | None, callback: Callable[[Connection], Awaitable[Any]]
) -> ScopedConnectionAction:
    """
    Create an action that performs a set of independent actions on the same
    connection.

    :param key: a key one or more of the inner actions act on, or ``None`` if
     no keys are acted on or they aren't known yet. Generally only needed
     when the action is routed through a cluster.
    :param callback: coroutine function that carries out the inner actions.
     Any error it raises propagates immediately.

    .. note:: This only guarantees that all inner actions share one
       connection, it doesn't make them transactional. Use ``WATCH``,
       ``MULTI`` & ``EXEC`` inside the callback, or an
       :class:`~respact.commands.EvalScript`, for that.

    Example::

        async def transfer(connection):
            await connection.do(cmd(None, "WATCH", "balance"))
            await connection.do(cmd(None, "MULTI"))
            await connection.do(cmd(None, "DECRBY", "balance", "10"))
            await connection.do(cmd(None, "EXEC"))

        await connection.do(with_connection("balance", transfer))
    """
    return ScopedConnectionAction(key, callback)

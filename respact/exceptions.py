from __future__ import annotations

from respact.typing import Final

#: Upper bound on nested :class:`ReplyDiscardedError` wrappers that
#: :func:`unwrap_discarded` will peel off.
MAX_UNWRAP_DEPTH: Final[int] = 32


class RedisError(Exception):
    """
    Base exception from which all other exceptions in respact
    derive from.
    """


class ConnectionError(RedisError):
    pass


class ProtocolError(ConnectionError):
    """
    Raised on errors related to ser/deser protocol parsing
    """


class BusyLoadingError(ConnectionError):
    pass


class InvalidResponse(RedisError):
    pass


class DataError(RedisError):
    """
    Raised when an argument can not be serialized into a request
    """


class ResponseError(RedisError):
    pass


class WrongTypeError(ResponseError):
    """
    Raised when an operation is performed on a key
    containing a datatype that doesn't support the operation
    """


class NoScriptError(ResponseError):
    """
    Raised when the server does not have a script cached for
    the sha used with ``EVALSHA``
    """


class ExecAbortError(ResponseError):
    pass


class ReadOnlyError(ResponseError):
    pass


class UnknownCommandError(ResponseError):
    """
    Raised when the server returns an error response relating
    to an unknown command.
    """


class AuthenticationRequiredError(ResponseError):
    """
    Raised when authentication parameters are required
    but not provided
    """


class AuthorizationError(ResponseError):
    """
    Raised when the current user is not permitted to run a command
    """


class ClusterDownError(ResponseError):
    """
    Error indicated ``CLUSTERDOWN`` error received from cluster.
    """


class ClusterCrossSlotError(ResponseError):
    """Raised when keys in request don't hash to the same slot"""


class TryAgainError(ResponseError):
    """
    Error indicated ``TRYAGAIN`` error received from cluster.
    Operations on keys that don't exist or are - during resharding - split
    between the source and destination nodes, will generate a -``TRYAGAIN`` error.
    """


class AskError(ResponseError):
    """
    Error indicated ``ASK`` error received from cluster.

    When a slot is set as ``MIGRATING``, the node will accept all queries that
    pertain to this hash slot, but only if the key in question exists,
    otherwise the query is forwarded using a -ASK redirection to the node that
    is target of the migration. Whether the action that triggered the
    redirect may be reissued is reported by its ``cluster_can_retry`` method.
    """

    def __init__(self, resp: str) -> None:
        super().__init__(resp)
        self.message = resp
        slot_id, new_node = resp.split(" ")
        host, port = new_node.rsplit(":", 1)
        self.slot_id = int(slot_id)
        self.node_addr = self.host, self.port = host, int(port)


class MovedError(AskError):
    """
    Error indicated ``MOVED`` error received from cluster.
    A request sent to a node that doesn't serve this key will be replayed with
    a ``MOVED`` error that points to the correct node.
    """


class ReplyDiscardedError(RedisError):
    """
    Raised when a reply was read off the wire in full but was deliberately
    not applied to its receiver. This is the case for error replies sent by
    the server and for replies that could not be converted into the
    receiver's type.

    Since the reply was consumed the connection is still positioned at the
    start of the next reply, which allows a pipeline to carry on decoding
    the replies of sibling commands.
    """

    def __init__(self, error: BaseException) -> None:
        #: The error that caused the reply to be discarded
        self.error = error
        super().__init__(str(error))


class ScriptArgumentError(RedisError, ValueError):
    """
    Raised when a script action is built with fewer arguments than
    the number of keys declared for the script
    """


class CommandReusedError(RedisError):
    """
    Raised when a command that has already completed is used again.
    Command objects are single use and are recycled once their reply
    has been decoded.
    """


def unwrap_discarded(error: BaseException | None) -> BaseException | None:
    """
    Peel off :class:`ReplyDiscardedError` wrappers until reaching the
    underlying cause (or ``None``)
    """
    depth = 0
    while isinstance(error, ReplyDiscardedError) and depth < MAX_UNWRAP_DEPTH:
        error = error.error
        depth += 1
    return error

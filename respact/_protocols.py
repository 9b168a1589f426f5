from __future__ import annotations

from respact.typing import TYPE_CHECKING, Protocol, StringT, runtime_checkable

if TYPE_CHECKING:
    from respact._packer import Packer
    from respact.resp import RawMessage


class ReplyReader(Protocol):
    async def read_message(self) -> RawMessage:
        """Read exactly one complete reply off the wire"""
        ...

    def invalidate(self) -> None:
        """
        Mark the reply stream as out of sync with the requests written (for
        example when replies were left unread) so that it is not read from again
        """
        ...


@runtime_checkable
class Marshaler(Protocol):
    def marshal(self, packer: Packer) -> None: ...


@runtime_checkable
class Unmarshaler(Protocol):
    async def unmarshal(self, reader: ReplyReader) -> None: ...


@runtime_checkable
class Connection(Protocol):
    async def encode_decode(
        self, marshaler: Marshaler | None, unmarshaler: Unmarshaler | None
    ) -> None:
        """
        Write the request produced by :paramref:`marshaler` (flushing it to the
        network) and then read the reply with :paramref:`unmarshaler`. Either
        side may be ``None`` to only write or only read.
        """
        ...


@runtime_checkable
class Action(Protocol):
    def keys(self) -> list[StringT]:
        """
        The keys this action will act on (used for routing requests in a cluster).
        The returned list must not be modified.
        """
        ...

    async def perform(self, connection: Connection) -> None: ...


@runtime_checkable
class CmdAction(Action, Marshaler, Unmarshaler, Protocol):
    """
    An :class:`Action` that can also be used as a pipelined command: its
    request is written with :meth:`marshal` and its reply later read with
    :meth:`unmarshal`. When performed directly neither method is called by
    the action itself, and when used in a pipeline :meth:`perform` only
    registers the action with the pipeline.
    """


@runtime_checkable
class ClusterRetryable(Protocol):
    def cluster_can_retry(self) -> bool:
        """
        Whether the action may be reissued against a different node
        after a cluster redirect
        """
        ...

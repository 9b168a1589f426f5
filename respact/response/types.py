from __future__ import annotations

from respact._protocols import ReplyReader, Unmarshaler
from respact.typing import Any, Callable, Generic, R, ResponseType


class Receiver(Generic[R]):
    """
    Holds the decoded value of a reply.

    :param transform: optional callable applied to the raw reply before it
     is stored. A :exc:`TypeError` or :exc:`ValueError` raised by it causes
     the reply to be discarded.

    Example::

        length = Receiver(int)
        await connection.do(cmd(length, "STRLEN", "key"))
        length.value
        # 5
    """

    def __init__(self, transform: Callable[[ResponseType], R] | None = None) -> None:
        self.transform = transform
        self.value: R | ResponseType = None
        #: Whether a reply has been stored
        self.received = False

    def set(self, response: ResponseType) -> None:
        self.value = self.transform(response) if self.transform else response
        self.received = True

    def __repr__(self) -> str:
        return f"{type(self).__name__}<value={self.value!r}>"


async def decode(reader: ReplyReader, receiver: Any) -> None:
    """
    Decode one reply into :paramref:`receiver`. Receivers implementing
    :class:`~respact._protocols.Unmarshaler` read the reply themselves.
    """
    if isinstance(receiver, Unmarshaler):
        await receiver.unmarshal(reader)
    else:
        message = await reader.read_message()
        message.unmarshal_into(receiver)


class ResultDecoder:
    """
    Unmarshaler that decodes a reply into an arbitrary receiver
    """

    __slots__ = ("receiver",)

    def __init__(self, receiver: Any) -> None:
        self.receiver = receiver

    async def unmarshal(self, reader: ReplyReader) -> None:
        await decode(reader, self.receiver)


class MaybeNil:
    """
    Wraps a receiver to detect nil replies.

    If the reply is a nil bulk string or a nil array :attr:`nil` is set and
    the receiver is left untouched. An empty array reply sets
    :attr:`empty_array` and is still decoded into the receiver as a normal
    value. Any other reply is decoded into the receiver.

    Example::

        value = MaybeNil(Receiver())
        await connection.do(cmd(value, "GET", "missing"))
        value.nil
        # True
    """

    def __init__(self, receiver: Any = None) -> None:
        self.nil = False
        self.empty_array = False
        self.receiver = receiver

    async def unmarshal(self, reader: ReplyReader) -> None:
        message = await reader.read_message()
        if message.is_nil():
            self.nil = True
            return
        if message.is_empty_array():
            self.empty_array = True
        message.unmarshal_into(self.receiver)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}<nil={self.nil}, empty_array={self.empty_array}, "
            f"receiver={self.receiver!r}>"
        )

from __future__ import annotations

import logging
from types import TracebackType

from anyio import BrokenResourceError, CancelScope, ClosedResourceError, EndOfStream
from anyio.abc import ByteStream
from deprecated.sphinx import versionadded

from respact._packer import Packer
from respact._protocols import Action, Marshaler, Unmarshaler
from respact._unpacker import NotEnoughData, Unpacker
from respact.exceptions import ConnectionError, ReplyDiscardedError
from respact.resp import RawMessage
from respact.typing import Self

logger = logging.getLogger(__name__)


class StreamReader:
    """
    Reads complete replies from a byte stream, buffering any data
    received beyond the end of the current reply.

    Any failure while reading (including cancellation) leaves the position
    in the reply stream unknown, after which the reader is :attr:`broken`.
    """

    def __init__(self, stream: ByteStream, unpacker: Unpacker, decode_responses: bool) -> None:
        self.stream = stream
        self.unpacker = unpacker
        self.decode_responses = decode_responses
        #: Set once replies can no longer be matched to the requests they answer
        self.broken = False

    async def read_message(self) -> RawMessage:
        if self.broken:
            raise ConnectionError("Connection not usable")
        try:
            while True:
                response = self.unpacker.parse(self.decode_responses)
                if not isinstance(response, NotEnoughData):
                    return RawMessage(response.response_type, response.response)
                try:
                    data = await self.stream.receive()
                except (EndOfStream, ClosedResourceError, BrokenResourceError) as err:
                    raise ConnectionError("Connection lost while receiving response") from err
                self.unpacker.feed(data)
        except BaseException:
            self.invalidate()
            raise

    def invalidate(self) -> None:
        self.broken = True


class StreamConnection:
    """
    Connection that performs actions over an already established
    :class:`anyio.abc.ByteStream`. Establishing (and pooling) the
    underlying transport is left to the caller.

    Example::

        stream = await anyio.connect_tcp("localhost", 6379)
        async with StreamConnection(stream, decode_responses=True) as connection:
            value = Receiver()
            await connection.do(cmd(value, "GET", "foo"))
    """

    def __init__(
        self,
        stream: ByteStream,
        encoding: str = "utf-8",
        decode_responses: bool = False,
    ) -> None:
        """
        :param stream: the transport to write requests to and read replies from
        :param encoding: encoding used for string arguments (and replies if
         :paramref:`decode_responses` is ``True``)
        :param decode_responses: whether simple & bulk string replies are decoded
         to :class:`str`
        """
        self.stream = stream
        self.encoding = encoding
        self.decode_responses = decode_responses
        self._unpacker = Unpacker(encoding)
        self._reader = StreamReader(stream, self._unpacker, decode_responses)

    def __repr__(self) -> str:
        return f"{type(self).__name__}<stream={self.stream!r}>"

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def is_connected(self) -> bool:
        """
        Whether the connection can still be used. A connection stops being
        usable once a request may not have been written in full or replies can
        no longer be matched to their requests.
        """
        return not self._reader.broken

    async def encode_decode(
        self, marshaler: Marshaler | None, unmarshaler: Unmarshaler | None
    ) -> None:
        """
        :raises ConnectionError: if the connection is no longer usable or the
         stream failed while sending or receiving
        """
        if self._reader.broken:
            raise ConnectionError("Connection not usable")
        try:
            if marshaler is not None:
                packer = Packer(self.encoding)
                marshaler.marshal(packer)
                if packer:
                    try:
                        await self.stream.send(packer.getvalue())
                    except (ClosedResourceError, BrokenResourceError) as err:
                        self._reader.invalidate()
                        raise ConnectionError("Connection lost while sending request") from err
                    except BaseException:
                        self._reader.invalidate()
                        raise
            if unmarshaler is not None:
                try:
                    await unmarshaler.unmarshal(self._reader)
                except ReplyDiscardedError:
                    raise
                except BaseException:
                    self._reader.invalidate()
                    raise
        finally:
            if self._reader.broken:
                await self._disconnect()

    async def _disconnect(self) -> None:
        logger.debug("Closing %r, replies are out of sync with requests", self)
        self._unpacker.reset()
        with CancelScope(shield=True):
            await self.stream.aclose()

    @versionadded(version="0.3.0")
    async def do(self, action: Action) -> None:
        """
        Perform :paramref:`action` on this connection
        """
        await action.perform(self)

    async def aclose(self) -> None:
        self._reader.invalidate()
        self._unpacker.reset()
        await self.stream.aclose()

from __future__ import annotations

from io import BytesIO
from typing import cast

from respact.constants import SYM_CRLF, RESPDataType
from respact.exceptions import (
    AskError,
    AuthenticationRequiredError,
    AuthorizationError,
    BusyLoadingError,
    ClusterCrossSlotError,
    ClusterDownError,
    ConnectionError,
    ExecAbortError,
    InvalidResponse,
    MovedError,
    NoScriptError,
    ProtocolError,
    ReadOnlyError,
    RedisError,
    ResponseError,
    TryAgainError,
    UnknownCommandError,
    WrongTypeError,
)
from respact.typing import (
    Final,
    MutableSet,
    NamedTuple,
    ResponsePrimitive,
    ResponseType,
    StringT,
)

#: Markers of replies that are made up of nested replies
AGGREGATE_TYPES: Final[frozenset[int]] = frozenset(
    {RESPDataType.ARRAY, RESPDataType.PUSH, RESPDataType.MAP, RESPDataType.SET}
)


class RESPNode:
    """
    An aggregate reply that is still waiting for :attr:`remaining`
    nested replies
    """

    __slots__ = ("container", "remaining", "key", "node_type")

    def __init__(
        self,
        container: list[ResponseType]
        | MutableSet[ResponsePrimitive | tuple[ResponsePrimitive, ...]]
        | dict[ResponsePrimitive, ResponseType],
        remaining: int,
        node_type: int,
    ):
        self.container = container
        self.remaining = remaining
        self.node_type = node_type
        self.key: ResponsePrimitive = None

    def append(self, item: ResponseType) -> None:
        if isinstance(self.container, list):
            self.container.append(item)
        elif isinstance(self.container, dict):
            if self.key is not None:
                self.container[self.key] = item
                self.key = None
            else:
                self.key = cast(ResponsePrimitive, item)
        else:
            self.container.add(cast(ResponsePrimitive, item))
        self.remaining -= 1


class NotEnoughData:
    pass


class UnpackedResponse(NamedTuple):
    response_type: int
    response: ResponseType


NOT_ENOUGH_DATA: Final[NotEnoughData] = NotEnoughData()


class Unpacker:
    """
    Incremental RESP reply parser. Data is pushed in with :meth:`feed`
    and complete replies are pulled out with :meth:`parse`.
    """

    EXCEPTION_CLASSES: dict[str, type[RedisError] | dict[str, type[RedisError]]] = {
        "ASK": AskError,
        "CLUSTERDOWN": ClusterDownError,
        "CROSSSLOT": ClusterCrossSlotError,
        "ERR": {
            "max number of clients reached": ConnectionError,
            "unknown command": UnknownCommandError,
            "unknown subcommand": UnknownCommandError,
        },
        "EXECABORT": ExecAbortError,
        "LOADING": BusyLoadingError,
        "NOSCRIPT": NoScriptError,
        "MOVED": MovedError,
        "NOAUTH": AuthenticationRequiredError,
        "NOPERM": AuthorizationError,
        "NOPROTO": ProtocolError,
        "READONLY": ReadOnlyError,
        "TRYAGAIN": TryAgainError,
        "WRONGTYPE": WrongTypeError,
    }

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self.buffer = BytesIO()
        self.read_offset = 0
        self.write_offset = 0
        #: Aggregates that have been started but not completed, innermost last
        self.pending: list[RESPNode] = []

    def parse_error(self, response: str) -> RedisError:
        """
        Map an error reply to an exception. The error code (when it is a known
        one) selects the exception class and is stripped from the message.

        :meta private:
        """
        error_code = response.split(" ")[0]
        exception_class = self.EXCEPTION_CLASSES.get(error_code)
        if exception_class is None:
            return ResponseError(response)
        message = response[len(error_code) + 1 :]
        if isinstance(exception_class, dict):
            for prefix, candidate in exception_class.items():
                if message.lower().startswith(prefix):
                    return candidate(message)
            return ResponseError(message)
        return exception_class(message)

    def feed(self, data: bytes) -> None:
        self.buffer.seek(self.write_offset)
        self.write_offset += self.buffer.write(data)
        self.buffer.seek(self.read_offset)

    def reset(self) -> None:
        self.buffer.seek(0)
        self.buffer.truncate()
        self.read_offset = self.write_offset = 0
        self.pending.clear()

    def parse(self, decode_bytes: bool) -> UnpackedResponse | NotEnoughData:
        """
        :return: The next complete reply in the buffer or :data:`NOT_ENOUGH_DATA`
         if more data needs to be fed first. Error replies are returned as
         (not raised) exceptions except for those signalling a broken connection.
        :raises InvalidResponse: if the data received isn't valid RESP
        """
        while True:
            line_start = self.read_offset
            line = self.buffer.readline()
            if line[-2:] != SYM_CRLF:
                self.buffer.seek(line_start)
                return NOT_ENOUGH_DATA
            self.read_offset += len(line)
            marker, chunk = line[0], line[1:-2]
            response: ResponseType

            if marker in AGGREGATE_TYPES:
                length = int(chunk)
                if length < 0:
                    response = None
                elif marker == RESPDataType.MAP:
                    response = {}
                elif marker == RESPDataType.SET:
                    response = set()
                else:
                    response = []
                if length > 0:
                    self.pending.append(
                        RESPNode(
                            response,  # type: ignore[arg-type]
                            length * 2 if marker == RESPDataType.MAP else length,
                            marker,
                        )
                    )
                    continue
            elif marker in (RESPDataType.BULK_STRING, RESPDataType.VERBATIM):
                length = int(chunk)
                if length < 0:
                    response = None
                elif self.write_offset - self.read_offset < length + 2:
                    self.read_offset = line_start
                    self.buffer.seek(line_start)
                    return NOT_ENOUGH_DATA
                else:
                    response = self._bulk_string(marker, length, decode_bytes)
            else:
                response = self._scalar(marker, chunk, decode_bytes)

            parsed = self._complete(marker, response)
            if parsed is not None:
                break

        if self.read_offset == self.write_offset:
            self.buffer.seek(0)
            self.buffer.truncate()
            self.read_offset = self.write_offset = 0
        return parsed

    def _bulk_string(self, marker: int, length: int, decode_bytes: bool) -> ResponsePrimitive:
        data = self.buffer.read(length + 2)[:-2]
        self.read_offset += length + 2
        if marker == RESPDataType.VERBATIM:
            if data[:3] != b"txt":
                raise InvalidResponse(f"Unexpected verbatim string of type {data[:3]!r}")
            data = data[4:]
        return self._string(data, decode_bytes)

    def _scalar(self, marker: int, chunk: bytes, decode_bytes: bool) -> ResponseType:
        if marker == RESPDataType.SIMPLE_STRING:
            return self._string(chunk, decode_bytes)
        elif marker in (RESPDataType.INT, RESPDataType.BIGNUMBER):
            return int(chunk)
        elif marker == RESPDataType.DOUBLE:
            return float(chunk)
        elif marker == RESPDataType.NONE:
            return None
        elif marker == RESPDataType.BOOLEAN:
            return chunk == b"t"
        elif marker == RESPDataType.ERROR:
            error = self.parse_error(chunk.decode(self.encoding, "replace"))
            if isinstance(error, ConnectionError):
                raise error
            return error
        raise InvalidResponse(f"Protocol Error: {chr(marker)}, {chunk!r}")

    def _string(self, data: bytes, decode_bytes: bool) -> StringT:
        if decode_bytes and self.encoding:
            return data.decode(self.encoding)
        return data

    def _complete(self, marker: int, response: ResponseType) -> UnpackedResponse | None:
        """
        Attach a reply to the innermost pending aggregate, completing
        aggregates outwards for as long as they have all their elements.

        :return: the top level reply once it is complete
        """
        while self.pending:
            node = self.pending[-1]
            node.append(response)
            if node.remaining > 0:
                return None
            self.pending.pop()
            marker, response = node.node_type, node.container
        return UnpackedResponse(marker, response)

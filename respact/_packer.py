from __future__ import annotations

from respact.constants import SYM_CRLF, SYM_DOLLAR, SYM_EMPTY, SYM_STAR
from respact.exceptions import DataError
from respact.typing import Any, Iterable


class Packer:
    """
    Serializes requests into the RESP wire format.

    The packer accumulates everything written to it in an internal
    buffer so that a whole batch of requests can be handed to the
    transport in a single write.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self.buffer = bytearray()

    def __len__(self) -> int:
        return len(self.buffer)

    def encode(self, value: Any) -> bytes:
        """Returns a bytestring representation of the value"""
        if isinstance(value, bytes):
            return value
        elif isinstance(value, str):
            return value.encode(self.encoding)
        elif isinstance(value, (bytearray, memoryview)):
            return bytes(value)
        elif isinstance(value, int):
            return b"%d" % value
        elif isinstance(value, float):
            return b"%.15g" % value
        elif value is None:
            return SYM_EMPTY
        raise DataError(
            f"Invalid input of type: {type(value).__name__!r}. "
            "Convert to a bytes, string, int or float first."
        )

    def array_header(self, length: int) -> None:
        self.buffer += SYM_EMPTY.join((SYM_STAR, b"%d" % length, SYM_CRLF))

    def bulk_string(self, value: Any) -> None:
        encoded = self.encode(value)
        self.buffer += SYM_EMPTY.join(
            (SYM_DOLLAR, b"%d" % len(encoded), SYM_CRLF, encoded, SYM_CRLF)
        )

    def pack_command(self, command: Any, *args: Any) -> None:
        """
        Pack a command & its arguments into the Redis protocol.

        All arguments are encoded before anything is written so that a
        failure to encode leaves the buffer untouched.
        """
        self.pack_encoded([self.encode(command), *(self.encode(arg) for arg in args)])

    def pack_encoded(self, elements: Iterable[bytes]) -> None:
        elements = list(elements)
        self.array_header(len(elements))
        for element in elements:
            self.bulk_string(element)

    def truncate(self, length: int) -> None:
        """Discard everything written after the first ``length`` bytes"""
        del self.buffer[length:]

    def getvalue(self) -> bytes:
        return bytes(self.buffer)

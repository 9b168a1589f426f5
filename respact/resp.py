from __future__ import annotations

import dataclasses

from respact._utils import b
from respact.constants import RESPDataType
from respact.exceptions import ReplyDiscardedError
from respact.response.types import Receiver
from respact.typing import Any, Mapping, ResponseType

#: Reply types that carry a nil marker
NIL_TYPES = frozenset({RESPDataType.BULK_STRING, RESPDataType.ARRAY, RESPDataType.NONE})


@dataclasses.dataclass(frozen=True, slots=True)
class RawMessage:
    """
    A single reply that has been read off the wire in full but
    not yet applied to a receiver.
    """

    response_type: int
    response: ResponseType

    def is_nil(self) -> bool:
        return self.response is None and self.response_type in NIL_TYPES

    def is_empty_array(self) -> bool:
        return self.response_type == RESPDataType.ARRAY and self.response == []

    def is_error(self) -> bool:
        return isinstance(self.response, BaseException)

    def unmarshal_into(self, receiver: Any) -> None:
        """
        Apply the reply to :paramref:`receiver`.

        - ``None`` discards the reply
        - a :class:`~respact.response.Receiver` stores it in
          :attr:`~respact.response.Receiver.value`
        - a :class:`list`, :class:`set`, :class:`dict` or :class:`bytearray`
          is refilled in place

        :raises ReplyDiscardedError: if the reply is an error reply or could
         not be applied to the receiver.
        """
        if self.is_error():
            error = self.response
            assert isinstance(error, BaseException)
            raise ReplyDiscardedError(error) from error
        try:
            apply_response(receiver, self.response)
        except (TypeError, ValueError) as err:
            raise ReplyDiscardedError(err) from err


def apply_response(receiver: Any, response: ResponseType) -> None:
    if receiver is None:
        return
    elif isinstance(receiver, Receiver):
        receiver.set(response)
    elif isinstance(receiver, bytearray):
        if response is None:
            receiver.clear()
        elif isinstance(response, (str, bytes, int, float)):
            receiver[:] = b(response)
        else:
            raise TypeError(f"Can't store a {type(response).__name__} reply in a bytearray")
    elif isinstance(receiver, list):
        receiver[:] = _as_sequence(response)
    elif isinstance(receiver, set):
        receiver.clear()
        receiver.update(_as_sequence(response))
    elif isinstance(receiver, dict):
        receiver.clear()
        if isinstance(response, Mapping):
            receiver.update(response)
        else:
            items = _as_sequence(response)
            if len(items) % 2:
                raise ValueError("Can't store an odd number of elements in a dict")
            receiver.update(zip(items[::2], items[1::2]))
    else:
        raise TypeError(f"Unsupported receiver type: {type(receiver).__name__}")


def _as_sequence(response: ResponseType) -> list[Any]:
    if response is None:
        return []
    elif isinstance(response, (list, set, frozenset, tuple)):
        return list(response)
    elif isinstance(response, Mapping):
        return [element for item in response.items() for element in item]
    raise TypeError(f"Can't store a {type(response).__name__} reply in a collection")

from __future__ import annotations

import json

from respact._packer import Packer
from respact._pool import ObjectPool
from respact._protocols import Connection, Marshaler, ReplyReader
from respact._unpacker import NotEnoughData, Unpacker
from respact._utils import flatten_arguments, freeze_arguments, nativestr
from respact.commands._key_spec import KeySpec
from respact.config import Config
from respact.exceptions import CommandReusedError, RedisError
from respact.response.types import decode
from respact.typing import Any, StringT, ValueT, add_runtime_checks


def cmd_string(marshaler: Marshaler) -> str:
    """
    Render a request the way it would be sent to redis,
    for example ``["SET" "foo" "bar"]``
    """
    packer = Packer()
    try:
        marshaler.marshal(packer)
        unpacker = Unpacker()
        unpacker.feed(packer.getvalue())
        parsed = unpacker.parse(decode_bytes=True)
    except (RedisError, TypeError, ValueError) as err:
        return f"error creating string: {str(err)!r}"
    if isinstance(parsed, NotEnoughData) or not isinstance(parsed.response, list):
        return "error creating string: 'incomplete request'"
    return "[" + " ".join(json.dumps(nativestr(part)) for part in parsed.response) + "]"


class Command:
    """
    A single redis command along with the receiver its reply will be
    decoded into. Instances are created with :func:`cmd` or
    :func:`flat_cmd` and are single use: once the reply has been decoded
    successfully the instance is recycled and must not be used again.
    """

    __slots__ = ("receiver", "name", "args", "flat", "flat_key", "flat_args", "released")

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.receiver: Any = None
        self.name: StringT = ""
        self.args: tuple[ValueT, ...] = ()
        self.flat = False
        self.flat_key: tuple[StringT, ...] = ()
        self.flat_args: tuple[Any, ...] = ()
        self.released = True

    def _ensure_usable(self) -> None:
        if self.released:
            raise CommandReusedError(
                "Command has already completed and can't be used again. "
                "Create a new command instead."
            )

    def keys(self) -> list[StringT]:
        if self.flat:
            return list(self.flat_key)
        return KeySpec.extract_keys(self.name, self.args)

    def marshal(self, packer: Packer) -> None:
        self._ensure_usable()
        if self.flat:
            elements = [
                packer.encode(self.name),
                packer.encode(self.flat_key[0]),
                *(packer.encode(arg) for arg in flatten_arguments(self.flat_args)),
            ]
        else:
            elements = [packer.encode(self.name), *(packer.encode(arg) for arg in self.args)]
        packer.pack_encoded(elements)

    async def unmarshal(self, reader: ReplyReader) -> None:
        self._ensure_usable()
        await decode(reader, self.receiver)
        if Config.command_pooling:
            _command_pool.release(self)
        else:
            self.reset()

    async def perform(self, connection: Connection) -> None:
        self._ensure_usable()
        await connection.encode_decode(self, self)

    def cluster_can_retry(self) -> bool:
        return True

    def __str__(self) -> str:
        return cmd_string(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}<{self}>"


_command_pool: ObjectPool[Command] = ObjectPool(
    Command, max_size=lambda: Config.command_pool_size
)


def _acquire() -> Command:
    command = _command_pool.acquire() if Config.command_pooling else Command()
    command.released = False
    return command


@add_runtime_checks
def cmd(receiver: Any, name: StringT, *args: ValueT) -> Command:
    """
    Create a command that decodes its reply into :paramref:`receiver`.

    The receiver may be ``None`` (the reply is discarded), a
    :class:`~respact.response.Receiver`, a :class:`list`, :class:`set`,
    :class:`dict` or :class:`bytearray` (refilled in place) or any
    :class:`~respact._protocols.Unmarshaler` such as
    :class:`~respact.response.MaybeNil`.

    Example::

        value = Receiver()
        await connection.do(cmd(value, "GET", "foo"))
    """
    command = _acquire()
    command.receiver = receiver
    command.name = name
    command.args = args
    return command


@add_runtime_checks
def flat_cmd(receiver: Any, name: StringT, key: StringT, *args: Any) -> Command:
    """
    Like :func:`cmd`, but the arguments following :paramref:`key` may be of
    almost any type and are flattened into bulk strings when the command is
    written: mappings expand to their keys & values, other iterables to
    their elements, and numbers are formatted as strings.

    ``flat_cmd`` does not work for commands whose first argument isn't a
    key (or, generally, for ``MSET``). Use :func:`cmd` for those.

    Example::

        await connection.do(flat_cmd(None, "HSET", "user:1", {"name": "a", "age": 3}))
    """
    command = _acquire()
    command.receiver = receiver
    command.name = name
    command.flat = True
    command.flat_key = (key,)
    command.flat_args = freeze_arguments(args)
    return command

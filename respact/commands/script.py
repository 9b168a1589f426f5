from __future__ import annotations

import dataclasses
import hashlib
import logging

from respact._packer import Packer
from respact._protocols import Connection
from respact._utils import b
from respact.commands.request import cmd_string
from respact.constants import EVAL, EVALSHA
from respact.exceptions import (
    NoScriptError,
    RedisError,
    ScriptArgumentError,
    unwrap_discarded,
)
from respact.response.types import ResultDecoder
from respact.typing import Any, StringT, ValueT

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class EvalScript:
    """
    The body of a lua script to be run with ``EVALSHA`` (falling back
    to ``EVAL`` when the server doesn't have the script cached).
    Instances are immutable and can be shared to build any number of
    actions with :meth:`cmd`.

    Example::

        concat = EvalScript(1, "return redis.call('GET', KEYS[1]) .. ARGV[1]")
        result = Receiver()
        await connection.do(concat.cmd(result, "test", "redis"))
    """

    #: Number of leading arguments passed to :meth:`cmd` that are keys
    num_keys: int
    #: The lua script
    script: StringT
    #: SHA1 hex digest of :attr:`script`
    sha: str = dataclasses.field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sha", hashlib.sha1(b(self.script)).hexdigest())

    def cmd(self, receiver: Any, *args: ValueT) -> EvalAction:
        """
        Create an action that runs the script with :paramref:`args`, the
        first :attr:`num_keys` of which are keys.

        :raises ScriptArgumentError: if fewer than :attr:`num_keys`
         arguments are given
        """
        if len(args) < self.num_keys:
            raise ScriptArgumentError(
                f"Script expects {self.num_keys} keys but only {len(args)} arguments were passed"
            )
        return EvalAction(self, args, receiver)


class EvalAction:
    """
    Action created by :meth:`EvalScript.cmd`
    """

    __slots__ = ("script", "args", "receiver", "eval")

    def __init__(self, script: EvalScript, args: tuple[ValueT, ...], receiver: Any) -> None:
        self.script = script
        self.args = args
        self.receiver = receiver
        #: When ``True`` the full script is sent with ``EVAL`` instead of its sha
        self.eval = False

    def keys(self) -> list[StringT]:
        return list(self.args[: self.script.num_keys])

    def marshal(self, packer: Packer) -> None:
        if self.eval:
            head = [EVAL, packer.encode(self.script.script)]
        else:
            head = [EVALSHA, packer.encode(self.script.sha)]
        packer.pack_encoded(
            [*head, b"%d" % self.script.num_keys, *(packer.encode(arg) for arg in self.args)]
        )

    async def _run(self, connection: Connection, eval: bool) -> None:
        self.eval = eval
        await connection.encode_decode(self, ResultDecoder(self.receiver))

    async def perform(self, connection: Connection) -> None:
        try:
            await self._run(connection, eval=False)
        except RedisError as err:
            if not isinstance(unwrap_discarded(err), NoScriptError):
                raise
            logger.debug("Script %s not cached on server, retrying with EVAL", self.script.sha)
            await self._run(connection, eval=True)

    def cluster_can_retry(self) -> bool:
        return True

    def __str__(self) -> str:
        return cmd_string(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}<{self}>"

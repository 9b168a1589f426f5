from __future__ import annotations

import dataclasses
import logging

from wrapt import ObjectProxy

from respact._packer import Packer
from respact._protocols import (
    Action,
    CmdAction,
    Connection,
    Marshaler,
    ReplyReader,
    Unmarshaler,
)
from respact.exceptions import ReplyDiscardedError, unwrap_discarded
from respact.typing import StringT

logger = logging.getLogger(__name__)


@dataclasses.dataclass(slots=True)
class PipelineEntry:
    """
    One request/reply pair registered with a pipeline while its
    actions were being performed
    """

    marshaler: Marshaler | None
    unmarshaler: Unmarshaler | None
    #: Error recorded for this request/reply pair, if any
    error: BaseException | None = None


class PipelineConnection(ObjectProxy):  # type: ignore
    """
    Stand-in for the real connection that actions are performed
    against while a pipeline collects their requests. Calls to
    :meth:`encode_decode` only register the request/reply pair with the
    pipeline; everything else is delegated to the wrapped connection.
    """

    def __init__(self, connection: Connection, pipeline: Pipeline) -> None:
        super().__init__(connection)
        self._self_pipeline = pipeline

    async def encode_decode(
        self, marshaler: Marshaler | None, unmarshaler: Unmarshaler | None
    ) -> None:
        self._self_pipeline.entries.append(PipelineEntry(marshaler, unmarshaler))

    async def do(self, action: Action) -> None:
        await action.perform(self)


class Pipeline:
    """
    Action that writes the requests of multiple commands to a connection in
    a single write and then reads all their replies in a single read,
    reducing network delay to a single round trip.

    Any error is raised after all replies that could be read have been
    decoded. If some of the commands failed with a genuine error while
    others only had their replies discarded the genuine error is raised.

    A failure of the stream while sending the requests fails every command
    with that error.
    A failure while reading replies (including the stream being closed) is
    recorded like any other genuine decode error: commands whose replies were
    already decoded keep no error, while the command being read and all the
    ones after it carry the error. Either way the connection is left unusable
    since replies can no longer be matched to their requests.

    .. note:: While a pipeline performs all its commands on one connection
       it shouldn't be used on its own for ``MULTI``/``EXEC`` transactions
       since an incomplete transaction is not discarded on error. Use
       :func:`~respact.commands.with_connection` or an
       :class:`~respact.commands.EvalScript` for transactional behavior.

    Example::

        a, b = Receiver(), Receiver()
        await connection.do(Pipeline(cmd(a, "GET", "a"), cmd(b, "GET", "b")))
    """

    def __init__(self, *cmds: CmdAction) -> None:
        self.cmds = cmds
        #: Request/reply pairs in the order they were registered during
        #: the last call to :meth:`perform`
        self.entries: list[PipelineEntry] = []
        #: The connection the pipeline is being performed against. Only set
        #: for the duration of :meth:`perform`
        self.connection: PipelineConnection | None = None

    def __len__(self) -> int:
        return len(self.cmds)

    def __repr__(self) -> str:
        return f"{type(self).__name__}<commands={len(self.cmds)}>"

    def keys(self) -> list[StringT]:
        return list({key for cmd in self.cmds for key in cmd.keys()})

    def _set_error(self, starting_at: int, error: BaseException) -> None:
        for entry in self.entries[starting_at:]:
            entry.error = error

    def marshal(self, packer: Packer) -> None:
        """
        Write the requests of all registered commands. Errors are recorded
        on the entries instead of being raised: the first request that fails
        to marshal (and all the ones after it, which are never sent) carry
        the error.
        """
        for idx, entry in enumerate(self.entries):
            if entry.marshaler is None:
                continue
            written = len(packer)
            try:
                entry.marshaler.marshal(packer)
            except Exception as err:
                packer.truncate(written)
                self._set_error(idx, err)
                break

    async def unmarshal(self, reader: ReplyReader) -> None:
        """
        Read the replies of all registered commands that were sent. A
        discarded reply only fails its own entry; any other error leaves the
        position in the reply stream unknown so it fails that entry and all
        the ones after it and invalidates the reader.
        """
        for idx, entry in enumerate(self.entries):
            if entry.unmarshaler is None or entry.error is not None:
                continue
            try:
                await entry.unmarshaler.unmarshal(reader)
            except ReplyDiscardedError as err:
                entry.error = err
            except Exception as err:
                reader.invalidate()
                self._set_error(idx, err)
                break

    async def perform(self, connection: Connection) -> None:
        self.entries = []
        self.connection = PipelineConnection(connection, self)
        try:
            for cmd in self.cmds:
                await cmd.perform(self.connection)
        finally:
            self.connection = None

        # marshal & unmarshal never raise, so any error here comes from the
        # connection itself (i.e. writing or flushing failed) and applies to
        # every command in the pipeline.
        try:
            await connection.encode_decode(self, self)
        except Exception as err:
            logger.debug("Pipeline of %d requests failed: %s", len(self.entries), err)
            self._set_error(0, err)
            raise

        error: BaseException | None = None
        all_discarded = True
        for entry in self.entries:
            if entry.error is None:
                continue
            error = entry.error
            if not isinstance(entry.error, ReplyDiscardedError):
                all_discarded = False

        if error is None:
            return
        if not all_discarded:
            error = unwrap_discarded(error)
            if error is None:
                return
        raise error

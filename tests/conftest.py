from __future__ import annotations

import pytest

from respact.commands.request import _command_pool
from respact.config import Config
from respact.connection import StreamConnection
from tests._stream import FakeStream


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def command_pool():
    _command_pool.clear()
    yield _command_pool
    _command_pool.clear()
    Config.command_pooling = None


@pytest.fixture
def stream():
    return FakeStream()


@pytest.fixture
def connection(stream):
    return StreamConnection(stream)


@pytest.fixture
def decoding_connection(stream):
    return StreamConnection(stream, decode_responses=True)

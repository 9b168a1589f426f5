"""
respact
-------

respact is an async execution engine for redis commands: single
commands, cached lua scripts and pipelines, performed over a RESP
connection.
"""

from __future__ import annotations

import logging

from respact.commands import (
    Command,
    EvalAction,
    EvalScript,
    cmd,
    flat_cmd,
    with_connection,
)
from respact.config import Config
from respact.connection import StreamConnection
from respact.pipeline import Pipeline
from respact.response import MaybeNil, Receiver

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "Command",
    "Config",
    "EvalAction",
    "EvalScript",
    "MaybeNil",
    "Pipeline",
    "Receiver",
    "StreamConnection",
    "cmd",
    "flat_cmd",
    "with_connection",
]

__version__ = "0.3.0"

"""
respact.commands
----------------

Actions that can be performed against a connection
"""

from __future__ import annotations

from ._key_spec import NO_KEY_COMMANDS, KeySpec
from .request import Command, cmd, flat_cmd
from .scoped import ScopedConnectionAction, with_connection
from .script import EvalAction, EvalScript

__all__ = [
    "Command",
    "EvalAction",
    "EvalScript",
    "KeySpec",
    "NO_KEY_COMMANDS",
    "ScopedConnectionAction",
    "cmd",
    "flat_cmd",
    "with_connection",
]

from __future__ import annotations

from .types import MaybeNil, Receiver, ResultDecoder, decode

__all__ = ["MaybeNil", "Receiver", "ResultDecoder", "decode"]

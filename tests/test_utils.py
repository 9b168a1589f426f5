from __future__ import annotations

import pytest

from respact._utils import b, flatten_arguments, freeze_arguments, nativestr
from respact.exceptions import (
    MAX_UNWRAP_DEPTH,
    DataError,
    ReplyDiscardedError,
    WrongTypeError,
    unwrap_discarded,
)


class TestUtils:
    def test_b(self):
        assert b("a") == b"a"
        assert b(b"a") == b"a"
        assert b(1) == b"1"
        assert b("é", "latin-1") == b"\xe9"

    def test_nativestr(self):
        assert nativestr(b"a") == "a"
        assert nativestr("a") == "a"
        assert nativestr(1.5) == "1.5"
        with pytest.raises(ValueError):
            nativestr(None)

    @pytest.mark.parametrize(
        "arguments, expected",
        [
            ([], []),
            (["a", 1, 2.5, None], ["a", 1, 2.5, None]),
            ([["a", "b"], ("c",)], ["a", "b", "c"]),
            ([{"f1": "v1", "f2": 2}], ["f1", "v1", "f2", 2]),
            (["a", {"b": [1, 2]}, (3, [4.0])], ["a", "b", 1, 2, 3, 4.0]),
            ([b"bytes", bytearray(b"ba")], [b"bytes", bytearray(b"ba")]),
        ],
    )
    def test_flatten_arguments(self, arguments, expected):
        assert list(flatten_arguments(arguments)) == expected

    def test_flatten_invalid(self):
        with pytest.raises(DataError, match="'object'"):
            list(flatten_arguments(["a", object()]))

    def test_freeze_arguments(self):
        frozen = freeze_arguments(["a", (x for x in (1, 2)), {"k": iter(["v"])}])
        assert frozen == ("a", (1, 2), (("k", ("v",)),))
        assert list(flatten_arguments(frozen)) == ["a", 1, 2, "k", "v"]
        assert list(flatten_arguments(frozen)) == ["a", 1, 2, "k", "v"]

    def test_freeze_keeps_invalid_values(self):
        invalid = object()
        assert freeze_arguments([invalid]) == (invalid,)
        with pytest.raises(DataError):
            list(flatten_arguments(freeze_arguments([invalid])))


class TestUnwrapDiscarded:
    def test_not_discarded(self):
        error = WrongTypeError("wrong")
        assert unwrap_discarded(error) is error
        assert unwrap_discarded(None) is None

    def test_nested(self):
        error = WrongTypeError("wrong")
        assert unwrap_discarded(ReplyDiscardedError(ReplyDiscardedError(error))) is error

    def test_depth_bounded(self):
        error = ReplyDiscardedError(ValueError("bad"))
        for _ in range(MAX_UNWRAP_DEPTH + 5):
            error = ReplyDiscardedError(error)
        assert isinstance(unwrap_discarded(error), ReplyDiscardedError)

    def test_message(self):
        assert str(ReplyDiscardedError(WrongTypeError("wrong"))) == "wrong"

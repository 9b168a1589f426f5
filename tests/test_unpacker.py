from __future__ import annotations

import pytest

from respact._unpacker import NOT_ENOUGH_DATA, Unpacker
from respact.constants import RESPDataType
from respact.exceptions import (
    AskError,
    BusyLoadingError,
    ConnectionError,
    InvalidResponse,
    MovedError,
    NoScriptError,
    ResponseError,
    UnknownCommandError,
    WrongTypeError,
)


@pytest.fixture
def unpacker():
    return Unpacker("latin-1")


@pytest.mark.parametrize(
    "decode",
    [
        True,
        False,
    ],
)
class TestUnpacker:
    def encoded_value(self, decode: bool, value: bytes):
        if decode:
            return value.decode("latin-1")
        return value

    def response(self, unpacker, decode):
        parsed = unpacker.parse(decode)
        assert parsed is not NOT_ENOUGH_DATA
        return parsed.response

    def test_incomplete_data(self, unpacker, decode):
        unpacker.feed(b"$10")
        assert unpacker.parse(decode) is NOT_ENOUGH_DATA
        unpacker.feed(b"\r\nhello")
        assert unpacker.parse(decode) is NOT_ENOUGH_DATA
        unpacker.feed(b"world\r\n")
        assert self.response(unpacker, decode) == self.encoded_value(decode, b"helloworld")

    def test_incomplete_array(self, unpacker, decode):
        unpacker.feed(b"*2\r\n:1\r\n")
        assert unpacker.parse(decode) is NOT_ENOUGH_DATA
        unpacker.feed(b":2\r\n")
        assert self.response(unpacker, decode) == [1, 2]

    def test_none(self, unpacker, decode):
        unpacker.feed(b"_\r\n")
        assert self.response(unpacker, decode) is None

    def test_simple_string(self, unpacker, decode):
        unpacker.feed(b"+PONG\r\n")
        assert self.response(unpacker, decode) == self.encoded_value(decode, b"PONG")

    def test_nil_bulk_string(self, unpacker, decode):
        unpacker.feed(b"$-1\r\n")
        parsed = unpacker.parse(decode)
        assert parsed.response_type == RESPDataType.BULK_STRING
        assert parsed.response is None

    def test_nil_array(self, unpacker, decode):
        unpacker.feed(b"*-1\r\n")
        parsed = unpacker.parse(decode)
        assert parsed.response_type == RESPDataType.ARRAY
        assert parsed.response is None

    def test_empty_array(self, unpacker, decode):
        unpacker.feed(b"*0\r\n")
        parsed = unpacker.parse(decode)
        assert parsed.response_type == RESPDataType.ARRAY
        assert parsed.response == []

    def test_numbers(self, unpacker, decode):
        unpacker.feed(b":1\r\n,1.5\r\n(3492890328409238509324850943850943825024385\r\n")
        assert self.response(unpacker, decode) == 1
        assert self.response(unpacker, decode) == 1.5
        assert self.response(unpacker, decode) == 3492890328409238509324850943850943825024385

    def test_boolean(self, unpacker, decode):
        unpacker.feed(b"#t\r\n#f\r\n")
        assert self.response(unpacker, decode) is True
        assert self.response(unpacker, decode) is False

    def test_verbatim(self, unpacker, decode):
        unpacker.feed(b"=9\r\ntxt:hello\r\n")
        assert self.response(unpacker, decode) == self.encoded_value(decode, b"hello")

    def test_nested_array(self, unpacker, decode):
        unpacker.feed(b"*2\r\n*2\r\n$1\r\na\r\n:1\r\n*0\r\n")
        assert self.response(unpacker, decode) == [
            [self.encoded_value(decode, b"a"), 1],
            [],
        ]

    def test_map(self, unpacker, decode):
        unpacker.feed(b"%2\r\n$1\r\na\r\n:1\r\n$1\r\nb\r\n*1\r\n:2\r\n")
        assert self.response(unpacker, decode) == {
            self.encoded_value(decode, b"a"): 1,
            self.encoded_value(decode, b"b"): [2],
        }

    def test_set(self, unpacker, decode):
        unpacker.feed(b"~2\r\n:1\r\n:2\r\n")
        assert self.response(unpacker, decode) == {1, 2}

    def test_multiple_replies(self, unpacker, decode):
        unpacker.feed(b"+OK\r\n:1\r\n")
        assert self.response(unpacker, decode) == self.encoded_value(decode, b"OK")
        assert self.response(unpacker, decode) == 1
        assert unpacker.parse(decode) is NOT_ENOUGH_DATA

    @pytest.mark.parametrize(
        "reply, exception_class, message",
        [
            (b"-ERR something bad\r\n", ResponseError, "something bad"),
            (b"-ERR unknown command 'FOO'\r\n", UnknownCommandError, "unknown command 'FOO'"),
            (b"-WRONGTYPE wrong kind of value\r\n", WrongTypeError, "wrong kind of value"),
            (
                b"-NOSCRIPT No matching script. Please use EVAL.\r\n",
                NoScriptError,
                "No matching script. Please use EVAL.",
            ),
            (b"-CUSTOM failure\r\n", ResponseError, "CUSTOM failure"),
        ],
    )
    def test_error_reply(self, unpacker, decode, reply, exception_class, message):
        unpacker.feed(reply)
        parsed = unpacker.parse(decode)
        assert parsed.response_type == RESPDataType.ERROR
        assert type(parsed.response) is exception_class
        assert str(parsed.response) == message

    def test_redirect_errors(self, unpacker, decode):
        unpacker.feed(b"-MOVED 3999 127.0.0.1:6381\r\n-ASK 3999 127.0.0.1:6382\r\n")
        moved = self.response(unpacker, decode)
        ask = self.response(unpacker, decode)
        assert isinstance(moved, MovedError)
        assert moved.slot_id == 3999
        assert moved.node_addr == ("127.0.0.1", 6381)
        assert type(ask) is AskError
        assert ask.port == 6382

    def test_error_in_array(self, unpacker, decode):
        unpacker.feed(b"*2\r\n:1\r\n-ERR bad\r\n")
        response = self.response(unpacker, decode)
        assert response[0] == 1
        assert isinstance(response[1], ResponseError)

    @pytest.mark.parametrize(
        "reply, exception_class",
        [
            (b"-ERR max number of clients reached\r\n", ConnectionError),
            (b"-LOADING Redis is loading the dataset in memory\r\n", BusyLoadingError),
        ],
    )
    def test_connection_errors_raised(self, unpacker, decode, reply, exception_class):
        unpacker.feed(reply)
        with pytest.raises(exception_class):
            unpacker.parse(decode)

    def test_invalid_marker(self, unpacker, decode):
        unpacker.feed(b"!x\r\n")
        with pytest.raises(InvalidResponse, match="Protocol Error"):
            unpacker.parse(decode)

    def test_reset(self, unpacker, decode):
        unpacker.feed(b"$10\r\nhello")
        assert unpacker.parse(decode) is NOT_ENOUGH_DATA
        unpacker.reset()
        unpacker.feed(b":1\r\n")
        assert self.response(unpacker, decode) == 1

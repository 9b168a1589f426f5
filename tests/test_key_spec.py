from __future__ import annotations

import pytest

from respact.commands import NO_KEY_COMMANDS, KeySpec, cmd, flat_cmd
from respact.commands._key_spec import find_streams_keys


class TestKeySpec:
    @pytest.mark.parametrize("command", sorted(NO_KEY_COMMANDS))
    def test_no_key_commands(self, command):
        assert KeySpec.extract_keys(command, ("a", "b", "c")) == []
        assert KeySpec.extract_keys(command.lower(), ("a",)) == []

    @pytest.mark.parametrize(
        "command, args, keys",
        [
            ("GET", ("foo",), ["foo"]),
            ("set", ("foo", "bar"), ["foo"]),
            ("MGET", ("a", "b"), ["a"]),
            ("DBSIZE", (), []),
            ("GET", (), []),
            ("BITOP", ("AND", "dest", "src1", "src2"), ["dest", "src1", "src2"]),
            ("BITOP", ("dest",), ["dest"]),
            ("XINFO", ("STREAM", "s1"), ["s1"]),
            ("XINFO", ("HELP",), []),
            ("XINFO", (), []),
            ("XGROUP", ("CREATE", "s1", "g1", "$"), ["s1"]),
            ("XGROUP", ("HELP",), ["HELP"]),
        ],
    )
    def test_extract_keys(self, command, args, keys):
        assert KeySpec.extract_keys(command, args) == keys

    def test_bitop_excludes_operation(self):
        assert KeySpec.extract_keys("BITOP", ("dest", "src1", "src2")) == ["src1", "src2"]

    def test_xread_streams(self):
        assert KeySpec.extract_keys(
            "XREAD", ("COUNT", "2", "STREAMS", "s1", "s2", "0", "0")
        ) == ["s1", "s2"]

    def test_xreadgroup_streams_case_insensitive(self):
        args = ("GROUP", "g", "c", "streams", "s1", ">")
        assert KeySpec.extract_keys("xreadgroup", args) == ["s1"]

    def test_xread_without_streams(self):
        assert KeySpec.extract_keys("XREAD", ("COUNT", "2")) == []

    def test_xread_unbalanced_streams(self):
        assert find_streams_keys(("STREAMS", "s1", "s2", "0")) == ["s1", "s2"]
        assert find_streams_keys(("STREAMS",)) == []

    def test_bytes_arguments(self):
        assert KeySpec.extract_keys(b"xread", (b"STREAMS", b"s1", b"0")) == [b"s1"]


class TestCommandKeys:
    def test_command_keys(self):
        assert cmd(None, "BITOP", "dest", "src1", "src2").keys() == ["src1", "src2"]
        assert cmd(None, "PING").keys() == []

    def test_flat_command_keys(self):
        assert flat_cmd(None, "HSET", "user:1", {"name": "x"}).keys() == ["user:1"]
        assert flat_cmd(None, "PING", "key").keys() == ["key"]

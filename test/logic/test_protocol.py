"""Tests for command formatting and response interpretation."""

import re

import pytest

from bciremote.protocol import (
    atoi,
    escape_special_chars,
    format_number,
    is_bare_prompt,
    is_simple_success,
    normalise_module_args,
    parse_status_code,
    start_executable_command,
    strip_prompt,
    wait_for_command,
)


def unescape(escaped: str) -> bytes:
    raw = escaped.encode("latin-1")
    return re.sub(rb"%([0-9A-F]{2})", lambda m: bytes([int(m.group(1), 16)]), raw)


class TestEscaping:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ('a"b', "a%22b"),
            ("#$", "%23%24"),
            ("{x}", "%7Bx%7D"),
            ("`a&b|c`", "%60a%26b%7Cc%60"),
            ("<in>;", "%3Cin%3E%3B"),
            ("one\ntwo", "one%0Atwo"),
            ("tab\there", "tab%09here"),
            ("é", "%C3%A9"),
        ],
    )
    def test_escaped_chars(self, line, expected):
        assert escape_special_chars(line) == expected

    def test_plain_text_unchanged(self):
        line = "Source:Signal int SampleBlockSize= 32 32 1 % // block (samples)"
        assert escape_special_chars(line) == line

    def test_percent_not_escaped(self):
        # a literal %22 is indistinguishable from an escaped quote
        assert escape_special_chars("%22") == "%22"

    def test_boundary_bytes(self):
        assert escape_special_chars("\x1f") == "%1F"
        assert escape_special_chars(" ") == " "
        assert escape_special_chars("\x7f") == "\x7f"
        assert escape_special_chars("\udc80") == "%80"
        assert escape_special_chars("\udc81") == "%81"

    def test_escaped_line_is_ascii(self):
        # "À" is C3 80 in UTF-8
        assert escape_special_chars("À") == "%C3%80"
        assert escape_special_chars("naïve ✓").isascii()

    @pytest.mark.parametrize(
        "line",
        [
            'Application string Caption= "Hello; world" // caption',
            "Filtering matrix Expressions= 1 1 (State1&State2)|$x",
            "naïve unicode ✓ line",
            "\x00\x01 control {chars}\r",
        ],
    )
    def test_unescape_reconstructs_original(self, line):
        assert unescape(escape_special_chars(line)) == line.encode("utf-8")


class TestResponseInterpretation:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("", 0),
            ("0", 0),
            ("1", 1),
            ("-3", -3),
            ("+7x", 7),
            ("  42 apples", 42),
            ("garbage", 0),
            ("1\r\n>", 1),
            ("- 3", 0),
        ],
    )
    def test_atoi(self, text, expected):
        assert atoi(text) == expected

    @pytest.mark.parametrize(
        "response, expected",
        [
            ("", True),
            ("  \r\n", True),
            ("0", False),
            ("1", True),
            ("garbage", False),
            ("garbage>", True),
            ("-3", True),
            (">", True),
        ],
    )
    def test_simple_success(self, response, expected):
        assert is_simple_success(response) is expected

    @pytest.mark.parametrize(
        "response, expected",
        [
            ("true\r\n>", 1),
            ("False", 0),
            ("1\r\n>", 1),
            ("2", 2),
            (">", 0),
            ("", 0),
        ],
    )
    def test_parse_status_code(self, response, expected):
        assert parse_status_code(response) == expected

    def test_prompt_helpers(self):
        assert strip_prompt("3.14\r\n>") == "3.14"
        assert strip_prompt(" >") == ""
        assert is_bare_prompt(">")
        assert is_bare_prompt("\r\n> ")
        assert not is_bare_prompt("error\r\n>")


class TestModuleArguments:
    def test_whitespace_removed_and_dashes_added(self):
        assert normalise_module_args([" foo bar "]) == ["--foobar", "--local"]

    @pytest.mark.parametrize("args", [None, []])
    def test_no_arguments(self, args):
        assert normalise_module_args(args) == ["--local"]

    def test_existing_local_not_duplicated(self):
        assert normalise_module_args(["--LOCAL"]) == ["--LOCAL"]
        assert normalise_module_args(["local"]) == ["--local"]
        assert normalise_module_args(["LogKeyboard=1", "--local"]) == [
            "--LogKeyboard=1",
            "--local",
        ]

    def test_start_executable_command(self):
        assert (
            start_executable_command("SignalGenerator", ["LogKeyboard = 1"])
            == "start executable SignalGenerator --LogKeyboard=1 --local"
        )
        assert (
            start_executable_command("DummyApplication", None)
            == "start executable DummyApplication --local"
        )


class TestFormatting:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (1.0, "1"),
            (0.5, "0.5"),
            (1e-7, "0.0000001"),
            (-2.25, "-2.25"),
            (3, "3"),
            (1e20, "100000000000000000000"),
            (-0.0, "0"),
        ],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_wait_for_command(self):
        assert wait_for_command("Connected") == "wait for Connected"
        assert (
            wait_for_command(("Resting", "Initialization"))
            == "wait for Resting|Initialization"
        )

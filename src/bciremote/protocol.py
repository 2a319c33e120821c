"""Command formatting and response interpretation for the operator protocol.

The operator answers every command with free text followed by a `>` prompt.
There is no structured status, so success is inferred from the text:

- an empty (or all-whitespace) response is taken as success,
- a response starting with a non-zero integer is success,
- a response containing the prompt character is success.

Anything else is diagnostic text and counts as a failure.

Raw lines embedded in commands (e.g. parameter definitions read from a file)
are escaped with `escape_special_chars`. Values the client formats itself are
wrapped in double quotes instead.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from bciremote.util.defaults import PROMPT

ESCAPE_CHARS = frozenset('#"${}`&|<>;\n')
LOCAL_FLAG = "--local"

_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


def escape_special_chars(line: str) -> str:
    """Percent-encode the bytes of `line` that the operator shell would interpret.

    Shell metacharacters become `%XX` in uppercase hex, as do bytes below 32
    and all non-ASCII bytes (128 and up), so the escaped line is plain ASCII.
    `%` itself is left alone, so a literal `%22` in the input cannot be told
    apart from an escaped quote.
    """
    out = []
    for byte in line.encode("utf-8", errors="surrogateescape"):
        char = chr(byte)
        if char in ESCAPE_CHARS or byte < 32 or byte >= 128:
            out.append(f"%{byte:02X}")
        else:
            out.append(char)
    return "".join(out)


def atoi(text: str) -> int:
    """Leading integer of `text` with C `atoi` semantics.

    Leading whitespace and one sign are accepted, trailing content is ignored,
    and text without a leading integer gives 0.
    """
    match = _LEADING_INT.match(text)
    if match is None:
        return 0
    return int(match.group(1))


def parse_status_code(response: str) -> int:
    """Status code carried by a raw response.

    Boolean answers (`is parameter` and friends) map to 1/0, anything else falls
    back to the leading integer.
    """
    words = response.split()
    if words:
        first = words[0].lower()
        if first == "true":
            return 1
        if first == "false":
            return 0
    return atoi(response)


def is_simple_success(response: str) -> bool:
    return not response.strip() or atoi(response) != 0 or PROMPT in response


def is_bare_prompt(response: str) -> bool:
    return response.strip() == PROMPT


def strip_prompt(response: str) -> str:
    """Remove surrounding line endings, spaces and prompt characters."""
    return response.strip("\r\n >")


def quote(value: str) -> str:
    return f'"{value}"'


def format_number(value: float) -> str:
    """Positional decimal rendering with no exponent and no trailing zeros.

    >>> format_number(1.0), format_number(0.25), format_number(1e-7)
    ('1', '0.25', '0.0000001')
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def normalise_module_args(args: Optional[Sequence[str]]) -> list[str]:
    """Turn user-supplied module arguments into command-line flags.

    Whitespace is removed from every argument and `--` is prefixed where
    missing. `--local` is appended unless an argument already mentions it
    (case-insensitive).
    """
    flags = []
    has_local = False
    for arg in args or ():
        flag = "".join(arg.split())
        if not flag.startswith("--"):
            flag = "--" + flag
        if LOCAL_FLAG in flag.lower():
            has_local = True
        flags.append(flag)
    if not has_local:
        flags.append(LOCAL_FLAG)
    return flags


def start_executable_command(module: str, args: Optional[Sequence[str]]) -> str:
    return " ".join(["start executable", module, *normalise_module_args(args)])


def wait_for_command(states: Iterable[str] | str) -> str:
    if isinstance(states, str):
        return f"wait for {states}"
    return "wait for " + "|".join(states)

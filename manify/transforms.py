"""Text transforms shared by the troff emitters.

Every transform is a pure function returning a new string. Results larger
than `capacity` characters are rejected with `BufferOverflowError` rather
than truncated.
"""

from __future__ import annotations

import re
import string

from .constants import DEFAULT_BUFFER_CAPACITY
from .exceptions import BufferOverflowError

_ESCAPE_PATTERN = re.compile(r"\\|(?<=\n)['.]")
_LEADING_SPACES_PATTERN = re.compile(r"^ +", re.MULTILINE)
_LINE_PATTERN = re.compile(r"[^\n]*\n|[^\n]+")
_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)


def _checked(result: str, operation: str, source: str, capacity: int | None) -> str:
    if capacity is not None and len(result) > capacity:
        raise BufferOverflowError(operation, capacity, source)
    return result


def escape(
    text: str,
    capacity: int | None = DEFAULT_BUFFER_CAPACITY,
    at_line_start: bool = False,
) -> str:
    r"""Escape characters that troff would read as control sequences.

    Backslashes are doubled. An apostrophe or period immediately after a
    newline gets a backslash in front of it so the line is not taken for a
    request. The first character of `text` is only escaped when
    `at_line_start` says the text will begin an output line.

    Args:
        text: Raw text to escape.
        capacity: Largest allowed result, in characters; None disables the check.
        at_line_start: Whether the first character starts an output line.

    Returns:
        str: Escaped text.

    Raises:
        BufferOverflowError: If the escaped text exceeds `capacity`.

    Examples:
        escape("a\\b")  # "a\\\\b"
        escape("x\n.y")  # "x\n\\.y"
    """
    escaped = _ESCAPE_PATTERN.sub(lambda match: "\\" + match.group(0), text)
    if at_line_start and escaped[:1] in ("'", "."):
        escaped = "\\" + escaped
    return _checked(escaped, "escape", text, capacity)


def trim_leading_spaces(text: str, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    """Remove the spaces that start the text and each of its lines.

    Tabs, newlines and everything after the first non-space character of a
    line are preserved.

    Examples:
        trim_leading_spaces("  a\\n    b\\n")  # "a\\nb\\n"
    """
    trimmed = _LEADING_SPACES_PATTERN.sub("", text)
    return _checked(trimmed, "trim", text, capacity)


def reindent(text: str, delta: int, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    """Shift every line of `text` by `delta` columns.

    A positive delta prepends that many spaces to each line. A negative delta
    removes up to ``-delta`` spaces from the start of each line, stopping at
    the first other character.

    Args:
        text: Text whose lines should be shifted.
        delta: Signed number of columns.
        capacity: Largest allowed result, in characters; None disables the check.

    Returns:
        str: Re-indented text.

    Raises:
        BufferOverflowError: If the re-indented text exceeds `capacity`.

    Examples:
        reindent("a\\nb\\n", 2)  # "  a\\n  b\\n"
        reindent("      a\\n  b\\n", -4)  # "  a\\nb\\n"
    """
    lines = _LINE_PATTERN.findall(text)
    if delta >= 0:
        padding = " " * delta
        shifted = "".join(padding + line for line in lines)
    else:
        shifted = "".join(line[min(leading_spaces(line), -delta) :] for line in lines)
    return _checked(shifted, "indent", text, capacity)


def leading_spaces(text: str) -> int:
    """Count the spaces at the start of `text`."""
    return len(text) - len(text.lstrip(" "))


def to_upper(text: str) -> str:
    # ASCII only; troff page titles are plain identifiers.
    return text.translate(_ASCII_UPPER)

"""Rendering of the per-symbol manual pages."""

from __future__ import annotations

import re

from .config import ManifyConfig
from .constants import (
    CANONICAL_INDENT,
    DEFAULT_BUFFER_CAPACITY,
    EXAMPLE_END,
    EXAMPLE_START,
    EXTERN_QUALIFIER,
    LINE_BREAK,
    PARAGRAPH,
    SECTION_HEADING,
    SYMBOL_NAME_BODY,
    TITLE,
)
from .exceptions import MalformedInputError, PatternCompilationError
from .transforms import escape, leading_spaces, reindent, to_upper, trim_leading_spaces


def compile_symbol_pattern(prefixes: str) -> re.Pattern[str]:
    """Compile the pattern that finds a symbol name in a prototype.

    A symbol name starts with one of `prefixes`, continues with letters,
    digits or dashes, and is followed by an opening parenthesis, optionally
    after one space.

    Args:
        prefixes: Body of a regular-expression character class, such as
            ``"bu"`` or ``"a-z"``.

    Returns:
        re.Pattern[str]: Compiled symbol-name pattern.

    Raises:
        PatternCompilationError: If the resulting expression is invalid.

    Examples:
        compile_symbol_pattern("bu").search("int bstrcmp (b0, b1);")
    """
    source = f"[{prefixes}]{SYMBOL_NAME_BODY}"
    try:
        return re.compile(source)
    except re.error as error:
        raise PatternCompilationError(source, str(error)) from error


def extract_symbol_name(text: str, pattern: re.Pattern[str]) -> str:
    """Return the name of the function declared by a prototype.

    Raises:
        MalformedInputError: If no symbol name followed by ``(`` is present.

    Examples:
        extract_symbol_name("extern bstring bfromcstr (const char * s);\\n", pattern)
        # "bfromcstr"
    """
    match = pattern.search(text)
    if match is None:
        raise MalformedInputError(f"no match for {pattern.pattern!r}", text)
    return match.group(0).rstrip("( ")


def clean_prototype(text: str, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    """Prepare a prototype for the SYNOPSIS section.

    The indentation of the first line is removed from every line. An
    ``extern`` qualifier is dropped, and the line after it loses as many
    leading spaces as the qualifier was wide so that continued argument
    lists stay aligned. The result is escaped last.

    Args:
        text: Prototype block as found in the manual.
        capacity: Largest allowed result, in characters.

    Returns:
        str: Cleaned prototype, ending with a newline.

    Examples:
        clean_prototype("extern int bfoo (int a,\\n                int b);\\n")
        # "int bfoo (int a,\\n         int b);\\n"
    """
    prototype = reindent(text, -leading_spaces(text), capacity)

    start = prototype.find(EXTERN_QUALIFIER)
    if start != -1:
        prototype = prototype[:start] + prototype[start + len(EXTERN_QUALIFIER) :]
        newline = prototype.find("\n", start)
        if newline != -1:
            following = prototype[newline + 1 :]
            shift = min(leading_spaces(following), len(EXTERN_QUALIFIER))
            prototype = prototype[: newline + 1] + following[shift:]

    if not prototype.endswith("\n"):
        prototype += "\n"
    return escape(prototype, capacity, at_line_start=True)


def symbol_page_head(name: str, prototype: str, config: ManifyConfig) -> str:
    """Render the title, NAME, and SYNOPSIS sections and open DESCRIPTION.

    The description paragraphs are appended by the caller.
    """
    return (
        f"{TITLE} {to_upper(name)} {config.section}\n"
        f"{SECTION_HEADING} NAME\n"
        f"{name} \\- {config.symbol_description}\n"
        f"{SECTION_HEADING} SYNOPSIS\n"
        f"{EXAMPLE_START}\n"
        f"{prototype}"
        f"{EXAMPLE_END}\n"
        f"{SECTION_HEADING} DESCRIPTION\n"
    )


def description_paragraph(text: str, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    body = trim_leading_spaces(text, capacity)
    return f"{PARAGRAPH}\n{escape(body, capacity, at_line_start=True)}"


def example_block(text: str, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    shifted = reindent(text, CANONICAL_INDENT - leading_spaces(text), capacity)
    body = escape(shifted, capacity, at_line_start=True)
    return f"{LINE_BREAK}\n{EXAMPLE_START}\n{body}{EXAMPLE_END}\n"

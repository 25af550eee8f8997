"""troff rendering for the block types found in the reference manual."""

from __future__ import annotations

from .config import ManifyConfig
from .constants import (
    CANONICAL_INDENT,
    DEFAULT_BUFFER_CAPACITY,
    EXAMPLE_END,
    EXAMPLE_START,
    NOFILL_END,
    NOFILL_START,
    ORDERED_LABEL_CHARS,
    PARAGRAPH,
    SECTION_HEADING,
    SUB_HEADING,
    TAGGED_PARAGRAPH,
    TITLE,
    UNORDERED_TAG,
)
from .exceptions import BufferOverflowError, MalformedInputError
from .transforms import escape, leading_spaces, reindent, to_upper, trim_leading_spaces


class BlockBuffer:
    """Accumulates the lines of a block that spans several scanner matches.

    Only one block is collected at a time. The buffer must be cleared once
    its block has been emitted.

    Args:
        capacity: Largest block, in characters, the buffer accepts.

    Examples:
        buffer = BlockBuffer(5000)
        buffer.start("1. first\\n")
        buffer.append("   continued\\n")
    """

    def __init__(self, capacity: int = DEFAULT_BUFFER_CAPACITY):
        self.capacity = capacity
        self._parts: list[str] = []
        self._size = 0

    def start(self, text: str) -> None:
        self.clear()
        self.append(text)

    def append(self, text: str) -> None:
        if self._size + len(text) > self.capacity:
            raise BufferOverflowError("accumulation", self.capacity, self.text + text)
        self._parts.append(text)
        self._size += len(text)

    def clear(self) -> None:
        self._parts.clear()
        self._size = 0

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def __bool__(self) -> bool:
        return self._size > 0


def library_head(config: ManifyConfig) -> str:
    """Render the title and NAME section of the library page."""
    return (
        f"{TITLE} {to_upper(config.library_name)} {config.section}\n"
        f"{SECTION_HEADING} NAME\n"
        f"{config.library_name} \\- {config.library_description}\n"
    )


def heading(text: str, level: int, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    """Render an underlined heading.

    Only the first line of `text` is used; the underline is dropped. Level 1
    headings are upper-cased section headings, deeper levels are
    sub-headings.

    Args:
        text: Heading line followed by its underline.
        level: 1 for a section heading, 2 or more for a sub-heading.
        capacity: Largest allowed escaped heading, in characters.

    Returns:
        str: A ``.SH`` or ``.SS`` line.

    Raises:
        ValueError: If `level` is lower than 1.
        MalformedInputError: If `text` has no line terminator.

    Examples:
        heading("Introduction\\n------------\\n", 1)  # ".SH INTRODUCTION\\n"
    """
    if level == 1:
        macro = SECTION_HEADING
        text = to_upper(text)
    elif level > 1:
        macro = SUB_HEADING
    else:
        raise ValueError(f"bad heading level: {level}")

    newline = text.find("\n")
    if newline == -1:
        raise MalformedInputError("no newline in heading", text)
    return f"{macro} {escape(text[: newline + 1], capacity)}"


def paragraph(text: str, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    body = trim_leading_spaces(text, capacity)
    return f"{PARAGRAPH}\n{escape(body, capacity, at_line_start=True)}"


def ordered_item(text: str, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    """Render a numbered list item.

    The item hangs off its label when its second line is indented or when
    it has a single line; otherwise the whole item is a plain paragraph.

    Args:
        text: Accumulated item, starting with its numeric label.
        capacity: Largest allowed escaped item, in characters.

    Returns:
        str: A ``.TP`` block, a ``.P`` block, or an empty string for an empty item.

    Raises:
        MalformedInputError: If `text` does not start with a numeric label.

    Examples:
        ordered_item("1. foo\\n   bar\\n")  # ".TP\\n1.\\nfoo\\n   bar\\n"
        ordered_item("1. foo\\nbar\\n")  # ".P\\n1. foo\\nbar\\n"
    """
    if not text:
        return ""

    item = text[leading_spaces(text) :]
    label_length = len(item) - len(item.lstrip(ORDERED_LABEL_CHARS))
    if not label_length:
        raise MalformedInputError("can't find ordered list marker", text)

    newline = text.find("\n")
    continued = newline != -1 and newline + 1 < len(text)
    if continued and text[newline + 1] != " ":
        return paragraph(text, capacity)

    label = escape(item[:label_length], capacity, at_line_start=True)
    body = item[label_length:].lstrip(" ")
    return f"{TAGGED_PARAGRAPH}\n{label}\n{escape(body, capacity, at_line_start=True)}"


def unordered_item(text: str, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    if not text:
        return ""
    body = trim_leading_spaces(text, capacity).lstrip("- ")
    return f"{TAGGED_PARAGRAPH}\n{UNORDERED_TAG}\n{escape(body, capacity, at_line_start=True)}"


def block_quote(text: str, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    """Render an indented block as an example, normalized to a four-space indent.

    The first line's indentation is taken as the block's indentation; every
    line is shifted by the same amount. Escaping happens after the shift so
    that a less indented line cannot expose a request character.
    """
    if not text:
        return ""
    shifted = reindent(text, CANONICAL_INDENT - leading_spaces(text), capacity)
    return f"\n{EXAMPLE_START}\n{escape(shifted, capacity, at_line_start=True)}{EXAMPLE_END}\n"


def literal(text: str, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    """Render text verbatim in no-fill mode (tables, file lists, acknowledgements)."""
    return f"\n{NOFILL_START}\n{escape(text, capacity, at_line_start=True)}{NOFILL_END}\n"


def macro_description(text: str, capacity: int | None = DEFAULT_BUFFER_CAPACITY) -> str:
    """Render a compilation macro and its description as a tagged paragraph.

    Args:
        text: Macro name on its own line, followed by the description, which
            may start with a dash.
        capacity: Largest allowed escaped block, in characters.

    Returns:
        str: A ``.TP`` block tagged with the macro name.

    Raises:
        MalformedInputError: If the macro name is not terminated by a newline.

    Examples:
        macro_description("BSTRLIB_NOVSNP\\n\\n- Disables vsnprintf.\\n")
    """
    trimmed = trim_leading_spaces(text, capacity)
    tag_end = trimmed.find("\n")
    if tag_end == -1:
        raise MalformedInputError("probably not a compilation macro description", text)
    tag = escape(trimmed[:tag_end], capacity, at_line_start=True)
    description = escape(trimmed[tag_end:].lstrip(" -\n"), capacity, at_line_start=True)
    return f"{TAGGED_PARAGRAPH}\n{tag}\n{description}"

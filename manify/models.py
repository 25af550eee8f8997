"""Data models for manify."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TextIO


class ScannerMode(Enum):
    """Block contexts the scanner can be in.

    Exactly one mode is active at a time; it decides which rules may match.

    Attributes:
        INITIAL: Default mode for ordinary document text.
        ORDERED_LIST: Collecting a numbered list item.
        UNORDERED_LIST: Collecting a ``-`` list item.
        BLOCK_QUOTE: Collecting an indented literal block.
        FUNCTION_HEADER: Waiting for the prototype of the next function.
        FUNCTION_BODY: Writing the description of the current function.
        FUNCTION_EXAMPLE: Expecting the example that follows a colon line.
        UNICODE_PARAGRAPHS: Formatting indented text as plain paragraphs.
        MAKEFILE_EXAMPLE: Collecting the Makefile example.
        TABLE: Collecting a table.
    """

    INITIAL = auto()
    ORDERED_LIST = auto()
    UNORDERED_LIST = auto()
    BLOCK_QUOTE = auto()
    FUNCTION_HEADER = auto()
    FUNCTION_BODY = auto()
    FUNCTION_EXAMPLE = auto()
    UNICODE_PARAGRAPHS = auto()
    MAKEFILE_EXAMPLE = auto()
    TABLE = auto()


@dataclass
class SymbolPage:
    """An open per-symbol manual page.

    Attributes:
        name: Function or macro name the page documents.
        stream: Destination the page is written to.
    """

    name: str
    stream: TextIO


@dataclass
class ScanContext:
    """Mutable scanner state threaded through the rule actions.

    Attributes:
        mode: Active scanner mode.
        position: Offset of the next unread character.
        page: Open per-symbol page; only set while a function body is
            being written.
    """

    mode: ScannerMode = ScannerMode.INITIAL
    position: int = 0
    page: SymbolPage | None = None


@dataclass
class ConversionResult:
    """Pages produced by an in-memory conversion.

    Attributes:
        main_page: troff source of the library page.
        symbol_pages: troff source of each per-symbol page, keyed by symbol name.
    """

    main_page: str
    symbol_pages: dict[str, str] = field(default_factory=dict)

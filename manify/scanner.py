"""Lexical scanner that turns the reference manual into manual pages.

The scanner walks the document with an ordered table of rules. At each
position every rule allowed in the current mode is tried; the longest
match wins and ties go to the rule listed first. A rule's action renders
troff, changes mode, or asks for its lexeme to be scanned again in the new
mode (pushback).
"""

from __future__ import annotations

import io
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from .config import ManifyConfig, validate_config
from .constants import HWS, NONBLANK
from .emitters import (
    BlockBuffer,
    block_quote,
    heading,
    library_head,
    literal,
    macro_description,
    ordered_item,
    paragraph,
    unordered_item,
)
from .exceptions import MalformedInputError, ResourceError
from .filesystem import library_page_path, open_page, read_manual, symbol_page_path
from .models import ConversionResult, ScanContext, ScannerMode, SymbolPage
from .symbols import (
    clean_prototype,
    compile_symbol_pattern,
    description_paragraph,
    example_block,
    extract_symbol_name,
    symbol_page_head,
)

PUSH_BACK = True
UNMATCHED = "unmatched"

Action = Callable[["Scanner", str], "bool | None"]


@dataclass(frozen=True)
class Rule:
    """One entry of the scanner's rule table.

    Attributes:
        name: Identifier used when tracing lexemes.
        modes: Modes in which the rule may match.
        pattern: Expression matched at the current position.
        action: Callback receiving the scanner and the matched lexeme;
            returning `PUSH_BACK` leaves the lexeme unconsumed.
    """

    name: str
    modes: frozenset[ScannerMode]
    pattern: re.Pattern[str]
    action: Action


class Scanner:
    """Converts the reference manual into a library page and per-symbol pages.

    Args:
        out: Destination of the library page.
        open_page: Callable returning a writable stream for a symbol name.
        config: Conversion settings; defaults to a new `ManifyConfig`.

    Raises:
        PatternCompilationError: If the configured symbol prefixes do not
            form a valid pattern.

    Examples:
        scanner = Scanner(sys.stdout, lambda name: open(f"man3/{name}.3", "w"))
        scanner.scan(Path("bstrlib.txt").read_text())
    """

    def __init__(
        self,
        out: TextIO,
        open_page: Callable[[str], TextIO],
        config: ManifyConfig | None = None,
    ):
        self.config = config or ManifyConfig()
        self.out = out
        self._open_page = open_page
        self.capacity = self.config.buffer_capacity
        self.context = ScanContext()
        self.buffer = BlockBuffer(self.capacity)
        self.symbol_pattern = compile_symbol_pattern(self.config.symbol_prefixes)
        self.rules = build_rules(self.config)

    def scan(self, text: str) -> None:
        """Convert `text`, then flush and close whatever is still pending."""
        for _ in self.tokens(text):
            pass

    def tokens(self, text: str) -> Iterator[tuple[str, str]]:
        """Scan `text`, yielding ``(rule name, lexeme)`` for each consumed lexeme.

        Characters no rule matches are copied to the library page and
        reported under the name ``"unmatched"``. Pushed-back lexemes are not
        yielded; they are yielded once the rule that finally consumes them
        has run.
        """
        context = self.context
        context.position = 0
        while context.position < len(text):
            rule, lexeme = self._longest_match(text, context.position)
            if rule is None:
                lexeme = text[context.position]
                self.write(lexeme)
                context.position += 1
                yield UNMATCHED, lexeme
                continue
            if rule.action(self, lexeme) is PUSH_BACK:
                continue
            context.position += len(lexeme)
            yield rule.name, lexeme
        self.finish()

    def _longest_match(self, text: str, position: int) -> tuple[Rule | None, str]:
        best_rule = None
        best_end = position
        for rule in self.rules:
            if self.context.mode not in rule.modes:
                continue
            match = rule.pattern.match(text, position)
            if match is not None and match.end() > best_end:
                best_rule = rule
                best_end = match.end()
        return best_rule, text[position:best_end]

    def finish(self) -> None:
        """Handle the end of input in the current mode."""
        render = _END_OF_INPUT_RENDERERS.get(self.context.mode)
        if render is not None:
            self.flush(render)
        self.close_symbol_page()
        self.enter(ScannerMode.INITIAL)

    def enter(self, mode: ScannerMode) -> None:
        self.context.mode = mode

    def write(self, markup: str) -> None:
        self.out.write(markup)

    def write_page(self, markup: str) -> None:
        page = self.context.page
        if page is None:
            raise MalformedInputError("function text outside of a function page", markup)
        page.stream.write(markup)

    def flush(self, render: Callable[[str, int], str]) -> None:
        """Render the accumulated block with `render` and clear the buffer."""
        text = self.buffer.text
        self.buffer.clear()
        self.write(render(text, self.capacity))

    def open_symbol_page(self, name: str) -> None:
        self.close_symbol_page()
        self.context.page = SymbolPage(name, self._open_page(name))

    def close_symbol_page(self) -> None:
        """Close the open per-symbol page, if any.

        Raises:
            ResourceError: If the page cannot be closed.
        """
        page = self.context.page
        if page is None:
            return
        self.context.page = None
        try:
            page.stream.close()
        except OSError as error:
            error_message = f"Could not close manpage for {page.name}: {error}"
            raise ResourceError(error_message) from error


def _on_title(scanner: Scanner, lexeme: str):
    scanner.write(library_head(scanner.config))
    scanner.write(heading(lexeme, 1, scanner.capacity))


def _on_function_banner(scanner: Scanner, lexeme: str):
    scanner.close_symbol_page()
    scanner.enter(ScannerMode.FUNCTION_HEADER)


def _on_function_end(scanner: Scanner, lexeme: str):
    scanner.close_symbol_page()
    scanner.enter(ScannerMode.INITIAL)


def _on_function_header(scanner: Scanner, lexeme: str):
    name = extract_symbol_name(lexeme, scanner.symbol_pattern)
    prototype = clean_prototype(lexeme, scanner.capacity)
    scanner.open_symbol_page(name)
    scanner.write_page(symbol_page_head(name, prototype, scanner.config))
    scanner.enter(ScannerMode.FUNCTION_BODY)


def _on_function_lead_in(scanner: Scanner, lexeme: str):
    scanner.write_page(description_paragraph(lexeme, scanner.capacity))
    scanner.enter(ScannerMode.FUNCTION_EXAMPLE)


def _on_function_example(scanner: Scanner, lexeme: str):
    scanner.write_page(example_block(lexeme, scanner.capacity))
    scanner.enter(ScannerMode.FUNCTION_BODY)


def _on_function_paragraph(scanner: Scanner, lexeme: str):
    scanner.write_page(description_paragraph(lexeme, scanner.capacity))


def _on_unicode_heading(scanner: Scanner, lexeme: str):
    scanner.write(heading(lexeme, 1, scanner.capacity))
    scanner.enter(ScannerMode.UNICODE_PARAGRAPHS)


def _on_unicode_end(scanner: Scanner, lexeme: str):
    scanner.enter(ScannerMode.INITIAL)
    return PUSH_BACK


def _on_section_heading(scanner: Scanner, lexeme: str):
    scanner.write(heading(lexeme, 1, scanner.capacity))


def _on_sub_heading(scanner: Scanner, lexeme: str):
    scanner.write(heading(lexeme, 2, scanner.capacity))


def _on_paragraph(scanner: Scanner, lexeme: str):
    scanner.write(paragraph(lexeme, scanner.capacity))


def _discard(scanner: Scanner, lexeme: str):
    pass


def _append(scanner: Scanner, lexeme: str):
    scanner.buffer.append(lexeme)


def _on_ordered_item(scanner: Scanner, lexeme: str):
    scanner.flush(ordered_item)
    scanner.buffer.start(lexeme)
    scanner.enter(ScannerMode.ORDERED_LIST)


def _on_ordered_end(scanner: Scanner, lexeme: str):
    scanner.flush(ordered_item)
    scanner.enter(ScannerMode.INITIAL)


def _on_unordered_item(scanner: Scanner, lexeme: str):
    scanner.flush(unordered_item)
    scanner.buffer.start(lexeme)
    scanner.enter(ScannerMode.UNORDERED_LIST)


def _on_unordered_end(scanner: Scanner, lexeme: str):
    scanner.flush(unordered_item)
    scanner.enter(ScannerMode.INITIAL)


def _on_quote_start(scanner: Scanner, lexeme: str):
    scanner.buffer.start(lexeme)
    scanner.enter(ScannerMode.BLOCK_QUOTE)


def _on_quote_end(scanner: Scanner, lexeme: str):
    scanner.flush(block_quote)
    scanner.enter(ScannerMode.INITIAL)
    return PUSH_BACK


def _on_makefile_start(scanner: Scanner, lexeme: str):
    scanner.buffer.start(lexeme)
    scanner.enter(ScannerMode.MAKEFILE_EXAMPLE)


def _on_table_start(scanner: Scanner, lexeme: str):
    scanner.buffer.start(lexeme)
    scanner.enter(ScannerMode.TABLE)


def _on_literal_end(scanner: Scanner, lexeme: str):
    scanner.flush(literal)
    scanner.enter(ScannerMode.INITIAL)
    return PUSH_BACK


def _on_literal(scanner: Scanner, lexeme: str):
    scanner.write(literal(lexeme, scanner.capacity))


def _on_macro_description(scanner: Scanner, lexeme: str):
    scanner.write(macro_description(lexeme, scanner.capacity))


_END_OF_INPUT_RENDERERS: dict[ScannerMode, Callable[[str, int], str]] = {
    ScannerMode.ORDERED_LIST: ordered_item,
    ScannerMode.UNORDERED_LIST: unordered_item,
    ScannerMode.BLOCK_QUOTE: block_quote,
    ScannerMode.MAKEFILE_EXAMPLE: literal,
    ScannerMode.TABLE: literal,
}


def build_rules(config: ManifyConfig) -> list[Rule]:
    """Build the scanner's rule table for `config`.

    Order matters: when two rules match the same number of characters, the
    one listed first wins.

    Args:
        config: Settings providing the document-specific markers.

    Returns:
        list[Rule]: Rules in priority order.
    """
    m = ScannerMode
    initial = {m.INITIAL}

    def rule(name, modes, source, action, flags=0):
        return Rule(name, frozenset(modes), re.compile(source, flags), action)

    title = re.escape(config.title_banner)
    makefile = re.escape(config.makefile_marker)
    acknowledgement = re.escape(config.acknowledgement_marker)
    macro = re.escape(config.macro_prefix)

    return [
        rule("title", initial, rf"{title}\n-{{3,}}\n", _on_title),
        # Function and macro pages
        rule(
            "function_banner",
            {m.INITIAL, m.FUNCTION_BODY},
            rf"^ {{4}}\.{{5,}}\n\n|The functions\n-{{5,}}\n\n|^The macros\n\n{NONBLANK}+\n\n",
            _on_function_banner,
            re.MULTILINE,
        ),
        rule("function_end", {m.FUNCTION_BODY}, r"={5,}\n", _on_function_end),
        rule("function_header", {m.FUNCTION_HEADER}, rf"{NONBLANK}+", _on_function_header),
        # Non-blank lines whose last line ends in a colon
        rule(
            "function_lead_in",
            {m.FUNCTION_BODY},
            rf"{NONBLANK}*{HWS}*[^ \t\n].*:\n\n",
            _on_function_lead_in,
        ),
        rule("function_example", {m.FUNCTION_EXAMPLE}, rf"{NONBLANK}+", _on_function_example),
        rule("function_paragraph", {m.FUNCTION_BODY}, rf"{NONBLANK}+", _on_function_paragraph),
        rule("function_blank", {m.FUNCTION_BODY}, r"\n", _discard),
        # The paragraphs after the Unicode heading are indented but are not examples.
        rule("unicode_heading", initial, r"Unicode functions\n-{3,}\n\n", _on_unicode_heading),
        rule("unicode_end", {m.UNICODE_PARAGRAPHS}, r" +\.{3,}\n\n", _on_unicode_end),
        rule("unicode_paragraph", {m.UNICODE_PARAGRAPHS}, rf"{NONBLANK}+", _on_paragraph),
        rule("unicode_blank", {m.UNICODE_PARAGRAPHS}, rf"{HWS}*\n", _discard),
        rule("section_heading", initial, r"^.{3,}\n-{3,}\n", _on_section_heading, re.MULTILINE),
        rule("sub_heading", initial, r"^.{3,}\n\.{3,}\n", _on_sub_heading, re.MULTILINE),
        rule("divider", initial, r"^={3,}\n", _discard, re.MULTILINE),
        rule("blank", initial, rf"{HWS}*\n", _discard),
        # Ordered list
        rule("ordered_item", {m.INITIAL, m.ORDERED_LIST}, r" *[0-9]+[.)] .*\n", _on_ordered_item),
        rule("ordered_line", {m.ORDERED_LIST}, r".+\n", _append),
        rule("ordered_end", {m.ORDERED_LIST}, r"\n", _on_ordered_end),
        # Unordered list
        rule("unordered_item", {m.INITIAL, m.UNORDERED_LIST}, r" *- .*\n", _on_unordered_item),
        rule("unordered_line", {m.UNORDERED_LIST}, r".+\n", _append),
        rule("unordered_end", {m.UNORDERED_LIST}, r"\n", _on_unordered_end),
        # Indented block quote, ended by a less indented line, with or without a
        # blank line before it, or by the end of input
        rule("quote_start", initial, r" {4,}.*\n", _on_quote_start),
        rule("quote_line", {m.BLOCK_QUOTE}, r" {4,}.*\n", _append),
        rule("quote_blank", {m.BLOCK_QUOTE}, r" *\n", _append),
        rule("quote_end", {m.BLOCK_QUOTE}, r"\n {0,3}[^ ]", _on_quote_end),
        rule("quote_break", {m.BLOCK_QUOTE}, r" {0,3}[^ \n]", _on_quote_end),
        # Makefile example
        rule("makefile_start", initial, rf"{makefile} = .+\n{NONBLANK}+\n", _on_makefile_start),
        rule(
            "makefile_recipe",
            {m.MAKEFILE_EXAMPLE},
            rf"{NONBLANK}\t.+\n{NONBLANK}+\n",
            _append,
        ),
        rule("makefile_end", {m.MAKEFILE_EXAMPLE}, rf"{NONBLANK}+", _on_literal_end),
        # Table: a header over two or more dash columns
        rule(
            "table_start",
            initial,
            rf"{NONBLANK}(?: *(?:-{{3,}} +)+-{{3,}}| *-{{6,}}) *\n{NONBLANK}*",
            _on_table_start,
        ),
        rule("table_row", {m.TABLE}, r".* {3,}.*\n|\n", _append),
        rule("table_end", {m.TABLE}, rf"{NONBLANK}", _on_literal_end),
        rule(
            "acknowledgements",
            initial,
            rf"{NONBLANK}*{acknowledgement}\n{NONBLANK}*",
            _on_literal,
        ),
        rule(
            "macro_description",
            initial,
            rf"{macro}[A-Z0-9_]+\n\n{NONBLANK}+\n",
            _on_macro_description,
        ),
        rule(
            "files",
            initial,
            rf"{NONBLANK}?(?:[a-zA-Z0-9_]+\.[a-z]+ {{2,}}- .+\n)+",
            _on_literal,
        ),
        # Catch-all paragraph
        rule("paragraph", initial, r"[^ \t\n\r\f\v0-9-].*\n(?:.+\n)*", _on_paragraph),
    ]


class _CapturedPage(io.StringIO):
    """In-memory page that records its text when closed."""

    def __init__(self, name: str, pages: dict[str, str]):
        super().__init__()
        self._name = name
        self._pages = pages

    def close(self) -> None:
        if not self.closed:
            self._pages[self._name] = self.getvalue()
        super().close()


def convert_text(content: str, config: ManifyConfig | None = None) -> ConversionResult:
    """Convert a reference manual without touching the filesystem.

    Args:
        content: Whole text of the manual.
        config: Conversion settings; defaults to a new `ManifyConfig`.

    Returns:
        ConversionResult: The library page and every per-symbol page.

    Raises:
        ConfigError: If the configuration fails validation.
        ManifyError: If the manual is malformed or a block exceeds the
            buffer capacity.

    Examples:
        result = convert_text(Path("bstrlib.txt").read_text())
        print(result.symbol_pages["bfromcstr"])
    """
    config = config or ManifyConfig()
    validate_config(config)

    symbol_pages: dict[str, str] = {}
    main_page = io.StringIO()
    scanner = Scanner(main_page, lambda name: _CapturedPage(name, symbol_pages), config)
    scanner.scan(content)
    return ConversionResult(main_page=main_page.getvalue(), symbol_pages=symbol_pages)


def write_pages(
    content: str,
    out: TextIO,
    config: ManifyConfig | None = None,
    notify: Callable[[str], None] | None = None,
) -> list[Path]:
    """Convert a manual, writing per-symbol pages under ``config.man_dir``.

    Args:
        content: Whole text of the manual.
        out: Destination of the library page.
        config: Conversion settings; defaults to a new `ManifyConfig`.
        notify: Optional callback receiving progress messages.

    Returns:
        list[Path]: Per-symbol pages written, in document order.

    Raises:
        ConfigError: If the configuration fails validation.
        ManifyError: If conversion fails; pages written so far are kept.
    """
    config = config or ManifyConfig()
    validate_config(config)
    man_dir = Path(config.man_dir)
    written: list[Path] = []

    def open_symbol_page(name: str) -> TextIO:
        path = symbol_page_path(man_dir, name, config.section)
        stream = open_page(path)
        written.append(path)
        if notify is not None:
            notify(f"Writing {path}")
        return stream

    scanner = Scanner(out, open_symbol_page, config)
    try:
        scanner.scan(content)
    finally:
        scanner.close_symbol_page()
    return written


def write_library_page(
    content: str,
    config: ManifyConfig | None = None,
    output: Path | None = None,
    notify: Callable[[str], None] | None = None,
) -> Path:
    """Convert a manual into a library page file and per-symbol pages.

    Args:
        content: Whole text of the manual.
        config: Conversion settings; defaults to a new `ManifyConfig`.
        output: Library page destination; defaults to
            ``<man_dir>/<library_name>.<section>``.
        notify: Optional callback receiving progress messages.

    Returns:
        Path: Where the library page was written.

    Raises:
        ConfigError: If the configuration fails validation.
        ManifyError: If conversion or writing fails.
    """
    config = config or ManifyConfig()
    validate_config(config)

    if output is None:
        output = library_page_path(Path(config.man_dir), config.library_name, config.section)
    with open_page(output) as stream:
        if notify is not None:
            notify(f"Writing {output}")
        write_pages(content, stream, config, notify)
    return output


def convert_file(
    filepath: Path,
    config: ManifyConfig | None = None,
    output: Path | None = None,
    notify: Callable[[str], None] | None = None,
) -> Path:
    """Convert a manual file into a library page and per-symbol pages.

    Args:
        filepath: Manual to convert.
        config: Conversion settings; defaults to a new `ManifyConfig`.
        output: Library page destination; defaults to
            ``<man_dir>/<library_name>.<section>``.
        notify: Optional callback receiving progress messages.

    Returns:
        Path: Where the library page was written.

    Raises:
        ConfigError: If the configuration fails validation.
        ManifyError: If reading, conversion, or writing fails.

    Examples:
        convert_file(Path("bstrlib.txt"), output=Path("man3/bstrlib.3"))
    """
    config = config or ManifyConfig()
    validate_config(config)
    content = read_manual(filepath, config.max_file_size)
    return write_library_page(content, config, output, notify)

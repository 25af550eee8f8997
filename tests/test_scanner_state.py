import io

import pytest

from manify.exceptions import MalformedInputError, ResourceError
from manify.models import ScanContext, ScannerMode
from manify.scanner import (
    PUSH_BACK,
    Scanner,
    _on_function_banner,
    _on_function_header,
    _on_function_lead_in,
    _on_ordered_end,
    _on_ordered_item,
    _on_quote_end,
    _on_quote_start,
    _on_unicode_end,
)


class _BrokenPage(io.StringIO):
    def close(self):
        if not self.closed:
            super().close()
            raise OSError("disk full")


def _scanner(opener=None) -> Scanner:
    return Scanner(io.StringIO(), opener or (lambda name: io.StringIO()))


def test_scan_context_defaults():
    ctx = ScanContext()

    assert ctx.mode is ScannerMode.INITIAL
    assert ctx.position == 0
    assert ctx.page is None


def test_ordered_item_starts_list_and_flushes_previous_item():
    scanner = _scanner()

    _on_ordered_item(scanner, "1. first\n")
    assert scanner.context.mode is ScannerMode.ORDERED_LIST
    assert scanner.out.getvalue() == ""
    assert scanner.buffer.text == "1. first\n"

    _on_ordered_item(scanner, "2. second\n")
    assert scanner.out.getvalue() == ".TP\n1.\nfirst\n"
    assert scanner.buffer.text == "2. second\n"


def test_ordered_end_returns_to_initial():
    scanner = _scanner()
    _on_ordered_item(scanner, "1. only\n")

    _on_ordered_end(scanner, "\n")

    assert scanner.context.mode is ScannerMode.INITIAL
    assert scanner.out.getvalue() == ".TP\n1.\nonly\n"
    assert not scanner.buffer


def test_quote_end_pushes_back():
    scanner = _scanner()
    _on_quote_start(scanner, "    x = 1;\n")

    assert _on_quote_end(scanner, "\nn") is PUSH_BACK
    assert scanner.context.mode is ScannerMode.INITIAL
    assert scanner.out.getvalue() == "\n.EX\n    x = 1;\n.EE\n"


def test_unicode_end_pushes_back_without_output():
    scanner = _scanner()
    scanner.enter(ScannerMode.UNICODE_PARAGRAPHS)

    assert _on_unicode_end(scanner, "    ....\n\n") is PUSH_BACK
    assert scanner.context.mode is ScannerMode.INITIAL
    assert scanner.out.getvalue() == ""


def test_function_header_opens_page():
    opened = []

    def opener(name):
        opened.append(name)
        return io.StringIO()

    scanner = _scanner(opener)
    _on_function_banner(scanner, "    .....\n\n")
    assert scanner.context.mode is ScannerMode.FUNCTION_HEADER

    _on_function_header(scanner, "    extern int bfoo (void);\n")

    assert opened == ["bfoo"]
    assert scanner.context.mode is ScannerMode.FUNCTION_BODY
    assert scanner.context.page.name == "bfoo"
    assert scanner.context.page.stream.getvalue().startswith(".TH BFOO 3\n")


def test_lead_in_expects_example():
    scanner = _scanner()
    _on_function_header(scanner, "int bfoo (void);\n")

    _on_function_lead_in(scanner, "    For example:\n\n")

    assert scanner.context.mode is ScannerMode.FUNCTION_EXAMPLE
    assert scanner.context.page.stream.getvalue().endswith(".P\nFor example:\n\n")


def test_open_symbol_page_closes_previous_page():
    streams = []

    def opener(name):
        streams.append(io.StringIO())
        return streams[-1]

    scanner = _scanner(opener)
    scanner.open_symbol_page("bfoo")
    scanner.open_symbol_page("bbar")

    assert streams[0].closed
    assert not streams[1].closed
    assert scanner.context.page.name == "bbar"


def test_close_symbol_page_without_page_is_a_no_op():
    scanner = _scanner()
    scanner.close_symbol_page()
    assert scanner.context.page is None


def test_close_failure_is_a_resource_error():
    scanner = _scanner(lambda name: _BrokenPage())
    scanner.open_symbol_page("bfoo")

    with pytest.raises(ResourceError, match="bfoo"):
        scanner.close_symbol_page()
    assert scanner.context.page is None


def test_function_text_requires_an_open_page():
    scanner = _scanner()
    scanner.enter(ScannerMode.FUNCTION_BODY)

    with pytest.raises(MalformedInputError, match="outside of a function page"):
        scanner.scan("    Orphan paragraph.\n")


def test_finish_flushes_pending_block_and_resets_mode():
    scanner = _scanner()
    _on_quote_start(scanner, "    tail;\n")

    scanner.finish()

    assert scanner.context.mode is ScannerMode.INITIAL
    assert scanner.out.getvalue() == "\n.EX\n    tail;\n.EE\n"


def test_finish_closes_open_page():
    stream = io.StringIO()
    scanner = _scanner(lambda name: stream)
    scanner.open_symbol_page("bfoo")
    scanner.enter(ScannerMode.FUNCTION_EXAMPLE)

    scanner.finish()

    assert stream.closed
    assert scanner.context.page is None
    assert scanner.context.mode is ScannerMode.INITIAL

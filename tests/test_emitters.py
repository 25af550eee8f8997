from __future__ import annotations

import pytest

from manify.config import ManifyConfig
from manify.emitters import (
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
from manify.exceptions import BufferOverflowError, MalformedInputError


def test_library_head_uses_configured_names():
    assert library_head(ManifyConfig()) == (
        ".TH BSTRLIB 3\n.SH NAME\nbstrlib \\- the better string library\n"
    )
    custom = ManifyConfig(library_name="mylib", section="3x", library_description="demo")
    assert library_head(custom) == ".TH MYLIB 3x\n.SH NAME\nmylib \\- demo\n"


def test_section_heading_is_upper_cased():
    assert heading("Introduction\n------------\n", 1) == ".SH INTRODUCTION\n"


def test_sub_heading_keeps_case():
    assert heading("Motivation\n..........\n", 2) == ".SS Motivation\n"


def test_heading_escapes_backslashes():
    assert heading("C\\C++\n-----\n", 2) == ".SS C\\\\C++\n"


def test_heading_requires_newline():
    with pytest.raises(MalformedInputError, match="no newline in heading"):
        heading("Introduction", 1)


def test_heading_rejects_level_below_one():
    with pytest.raises(ValueError):
        heading("Intro\n-----\n", 0)


def test_paragraph_trims_and_escapes():
    assert paragraph("  first\n  .second\n") == ".P\nfirst\n\\.second\n"


def test_paragraph_escapes_leading_period():
    assert paragraph(".hidden request\n") == ".P\n\\.hidden request\n"


def test_ordered_item_single_line():
    assert ordered_item("1. foo\n") == ".TP\n1.\nfoo\n"


def test_ordered_item_with_indented_continuation_hangs():
    assert ordered_item("1. foo\n   bar\n") == ".TP\n1.\nfoo\n   bar\n"


def test_ordered_item_with_flush_continuation_is_a_paragraph():
    assert ordered_item("1. foo\nbar\n") == ".P\n1. foo\nbar\n"


def test_ordered_item_parenthesis_label():
    assert ordered_item("  12) twelve\n") == ".TP\n12)\ntwelve\n"


def test_ordered_item_empty():
    assert ordered_item("") == ""


def test_ordered_item_without_label():
    with pytest.raises(MalformedInputError, match="can't find ordered list marker"):
        ordered_item("foo\n")


def test_unordered_item():
    assert unordered_item("- hello world\n") == ".TP\n-\nhello world\n"


def test_unordered_item_trims_continuation_lines():
    assert unordered_item("  - first\n    second\n") == ".TP\n-\nfirst\nsecond\n"


def test_unordered_item_empty():
    assert unordered_item("") == ""


def test_block_quote_keeps_four_space_indent():
    assert block_quote("    line one\n    line two\n") == (
        "\n.EX\n    line one\n    line two\n.EE\n"
    )


def test_block_quote_normalizes_deeper_indent():
    assert block_quote("        a;\n          b;\n") == "\n.EX\n    a;\n      b;\n.EE\n"


def test_block_quote_escapes_backslashes():
    assert block_quote('    printf ("\\n");\n') == '\n.EX\n    printf ("\\\\n");\n.EE\n'


def test_block_quote_escapes_request_exposed_by_less_indented_line():
    assert block_quote("        x = 1;\n    .foo\n") == "\n.EX\n    x = 1;\n\\.foo\n.EE\n"


def test_block_quote_empty():
    assert block_quote("") == ""


def test_literal_is_wrapped_in_no_fill():
    assert literal("a  b\nc  d\n") == "\n.nf\na  b\nc  d\n.fi\n"


def test_literal_escapes_line_starts():
    assert literal(".x\n'y\n") == "\n.nf\n\\.x\n\\'y\n.fi\n"


def test_macro_description():
    text = "BSTRLIB_NOVSNP\n\n- Disables the use of vsnprintf.\n"
    assert macro_description(text) == ".TP\nBSTRLIB_NOVSNP\nDisables the use of vsnprintf.\n"


def test_macro_description_escapes_description_start():
    assert macro_description("BSTRLIB_X\n\n- .foo\n") == ".TP\nBSTRLIB_X\n\\.foo\n"


def test_macro_description_requires_newline():
    with pytest.raises(MalformedInputError, match="compilation macro"):
        macro_description("BSTRLIB_NOVSNP")


def test_block_buffer_accumulates():
    buffer = BlockBuffer(capacity=20)
    assert not buffer

    buffer.start("1. first\n")
    buffer.append("   more\n")

    assert buffer
    assert buffer.text == "1. first\n   more\n"

    buffer.start("2. next\n")
    assert buffer.text == "2. next\n"

    buffer.clear()
    assert buffer.text == ""


def test_block_buffer_rejects_overflow():
    buffer = BlockBuffer(capacity=10)
    buffer.append("12345\n")

    with pytest.raises(BufferOverflowError) as excinfo:
        buffer.append("67890\n")

    assert excinfo.value.operation == "accumulation"
    assert buffer.text == "12345\n"

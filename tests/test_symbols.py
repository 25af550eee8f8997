from __future__ import annotations

import pytest

from manify.config import ManifyConfig
from manify.exceptions import BufferOverflowError, MalformedInputError, PatternCompilationError
from manify.symbols import (
    clean_prototype,
    compile_symbol_pattern,
    description_paragraph,
    example_block,
    extract_symbol_name,
    symbol_page_head,
)

PATTERN = compile_symbol_pattern("bu")


@pytest.mark.parametrize(
    ("prototype", "name"),
    [
        ("extern bstring bfromcstr (const char * s);\n", "bfromcstr"),
        ("extern int bconcat(bstring b0, const_bstring b1);\n", "bconcat"),
        ("extern int buIsUTF8Content (const_bstring bu);\n", "buIsUTF8Content"),
        ("#define blength(b) ((b)->slen)\n", "blength"),
        ("extern int bsplitcb (const_bstring str, unsigned char splitChar,\n", "bsplitcb"),
    ],
)
def test_extract_symbol_name(prototype, name):
    assert extract_symbol_name(prototype, PATTERN) == name


def test_extract_symbol_name_without_match():
    with pytest.raises(MalformedInputError, match="no match"):
        extract_symbol_name("extern int foo (void);\n", PATTERN)


def test_custom_prefix_class():
    pattern = compile_symbol_pattern("a-z")
    assert extract_symbol_name("int strlen (const char * s);\n", pattern) == "strlen"


def test_invalid_prefix_class():
    with pytest.raises(PatternCompilationError) as excinfo:
        compile_symbol_pattern("z-a")
    assert excinfo.value.pattern.startswith("[z-a]")


def test_clean_prototype_drops_extern():
    prototype = "extern bstrFoo (const char * s);\n"
    assert clean_prototype(prototype) == "bstrFoo (const char * s);\n"


def test_clean_prototype_realigns_continuation():
    prototype = (
        "    extern int bconcat (bstring b0,\n"
        "                        const_bstring b1);\n"
    )
    assert clean_prototype(prototype) == (
        "int bconcat (bstring b0,\n"
        "             const_bstring b1);\n"
    )


def test_clean_prototype_realigns_only_available_spaces():
    prototype = "extern int bfoo (int a,\n   int b);\n"
    assert clean_prototype(prototype) == "int bfoo (int a,\nint b);\n"


def test_clean_prototype_escapes_request_exposed_by_realignment():
    assert clean_prototype("extern int bfoo (int a,\n   .b);\n") == "int bfoo (int a,\n\\.b);\n"


def test_clean_prototype_without_extern():
    assert clean_prototype("  #define bdata(b) (b)\n") == "#define bdata(b) (b)\n"


def test_clean_prototype_adds_missing_newline():
    assert clean_prototype("int bfoo (void);") == "int bfoo (void);\n"


def test_clean_prototype_escapes():
    assert clean_prototype("int bfoo (char c = '\\\\');\n") == "int bfoo (char c = '\\\\\\\\');\n"


def test_clean_prototype_capacity():
    with pytest.raises(BufferOverflowError):
        clean_prototype("extern int bfoo (void);\n", capacity=10)


def test_symbol_page_head():
    head = symbol_page_head("bfromcstr", "bstring bfromcstr (const char * s);\n", ManifyConfig())

    assert head == (
        ".TH BFROMCSTR 3\n"
        ".SH NAME\n"
        "bfromcstr \\- bstrlib function\n"
        ".SH SYNOPSIS\n"
        ".EX\n"
        "bstring bfromcstr (const char * s);\n"
        ".EE\n"
        ".SH DESCRIPTION\n"
    )


def test_description_paragraph():
    assert description_paragraph("    Returns BSTR_OK\n    on success.\n") == (
        ".P\nReturns BSTR_OK\non success.\n"
    )


def test_example_block_is_normalized_to_four_spaces():
    assert example_block("        bconcat (b0, b1);\n") == ".br\n.EX\n    bconcat (b0, b1);\n.EE\n"
    assert example_block("  x = 1;\n") == ".br\n.EX\n    x = 1;\n.EE\n"


def test_example_block_escapes_request_exposed_by_less_indented_line():
    assert example_block("        x;\n    'bar\n") == ".br\n.EX\n    x;\n\\'bar\n.EE\n"

"""Constants used across the manify package."""

from __future__ import annotations

from .config import ManifyConfig

DEFAULT_CONFIG = ManifyConfig()

DEFAULT_BUFFER_CAPACITY = DEFAULT_CONFIG.buffer_capacity
DEFAULT_MAX_FILE_SIZE = DEFAULT_CONFIG.max_file_size

# troff macros
TITLE = ".TH"
SECTION_HEADING = ".SH"
SUB_HEADING = ".SS"
PARAGRAPH = ".P"
TAGGED_PARAGRAPH = ".TP"
EXAMPLE_START = ".EX"
EXAMPLE_END = ".EE"
NOFILL_START = ".nf"
NOFILL_END = ".fi"
LINE_BREAK = ".br"

# Literal blocks are re-indented to this depth
CANONICAL_INDENT = 4

EXTERN_QUALIFIER = "extern "
UNORDERED_TAG = "-"
ORDERED_LABEL_CHARS = "0123456789.)"

# Input patterns shared by several scanner rules
HWS = r"[ \t]"
NONBLANK = r"(?:[ \t]*[^ \t\n].*\n)"
SYMBOL_NAME_BODY = r"[a-zA-Z0-9-]+ ?\("

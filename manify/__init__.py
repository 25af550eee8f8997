"""
manify: manual page generator for the Better String Library reference manual.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    manify bstrlib.txt

Library Usage:
    from pathlib import Path
    from manify import convert_text

    result = convert_text(Path("bstrlib.txt").read_text())
    print(result.main_page)
    for name, page in result.symbol_pages.items():
        Path(f"man3/{name}.3").write_text(page)
"""

from .config import ConfigError, ManifyConfig
from .exceptions import (
    BufferOverflowError,
    MalformedInputError,
    ManifyError,
    PatternCompilationError,
    ResourceError,
)
from .models import ConversionResult, ScannerMode
from .scanner import Scanner, convert_file, convert_text, write_library_page, write_pages
from .transforms import escape, reindent, trim_leading_spaces

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "convert_text",
    "convert_file",
    "write_pages",
    "write_library_page",
    "Scanner",
    # Text transforms
    "escape",
    "reindent",
    "trim_leading_spaces",
    # Data models
    "ConversionResult",
    "ManifyConfig",
    "ScannerMode",
    # Exceptions
    "ConfigError",
    "ManifyError",
    "MalformedInputError",
    "BufferOverflowError",
    "ResourceError",
    "PatternCompilationError",
    # Version
    "__version__",
]

"""Filesystem helpers for manify."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TextIO

from .constants import DEFAULT_MAX_FILE_SIZE
from .exceptions import MalformedInputError, ResourceError

MAX_FILE_SIZE_ENV_VAR = "MANIFY_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum allowed size of the manual.

    Args:
        default: Fallback value in bytes when the environment variable is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["MANIFY_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size(default=102400)
    """
    raw_limit = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_limit is None:
        return default

    try:
        limit = int(raw_limit)
    except ValueError as error:
        error_message = f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {raw_limit} (expected bytes)"
        raise ValueError(error_message) from error

    if limit <= 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {limit}.")
    return limit


def read_manual(filepath: Path, max_size: int) -> str:
    """Read the reference manual from disk.

    Only regular files no larger than `max_size` bytes are read.

    Args:
        filepath: Path to the manual.
        max_size: Largest accepted size in bytes.

    Returns:
        str: Whole text of the manual.

    Raises:
        ResourceError: If the path is inaccessible, not a regular file, or
            larger than `max_size`.
        MalformedInputError: If the file is not valid UTF-8.

    Examples:
        text = read_manual(Path("bstrlib.txt"), get_max_file_size())
    """
    try:
        file_stat = os.stat(filepath)
    except OSError as error:
        raise ResourceError(f"Error accessing {filepath}: {error}", filepath) from error

    if not stat.S_ISREG(file_stat.st_mode):
        raise ResourceError(f"{filepath} is not a regular file.", filepath)
    if file_stat.st_size > max_size:
        error_message = f"{filepath} exceeds the maximum allowed size of {max_size} bytes."
        raise ResourceError(error_message, filepath)

    try:
        with open(filepath, "r", encoding="UTF-8") as stream:
            return stream.read()
    except UnicodeDecodeError as error:
        raise MalformedInputError(f"Invalid UTF-8 sequence in {filepath}", str(error)) from error
    except OSError as error:
        raise ResourceError(f"Error accessing {filepath}: {error}", filepath) from error


def read_stream(stream: TextIO, max_size: int, name: str = "standard input") -> str:
    """Read the reference manual from an open text stream.

    The stream cannot be measured up front, so at most ``max_size + 1``
    characters are read and the UTF-8 size of what came back is checked.

    Raises:
        ResourceError: If the stream holds more than `max_size` bytes or cannot be read.
        MalformedInputError: If the stream is not valid UTF-8.
    """
    try:
        content = stream.read(max_size + 1)
    except UnicodeDecodeError as error:
        raise MalformedInputError(f"Invalid UTF-8 sequence in {name}", str(error)) from error
    except OSError as error:
        raise ResourceError(f"Error reading {name}: {error}") from error

    if len(content) > max_size or len(content.encode("UTF-8", "replace")) > max_size:
        raise ResourceError(f"{name} exceeds the maximum allowed size of {max_size} bytes.")
    return content


def ensure_directory(directory: Path) -> None:
    """Create `directory` unless it already exists.

    Raises:
        ResourceError: If the path exists but is not a directory, or cannot
            be created.
    """
    if directory.is_dir():
        return
    try:
        directory.mkdir(mode=0o775, parents=True)
    except OSError as error:
        error_message = f"Could not create manpage directory {directory}: {error}"
        raise ResourceError(error_message, directory) from error


def symbol_page_path(man_dir: Path, name: str, section: str) -> Path:
    return man_dir / f"{name}.{section}"


# The library page shares the directory and naming scheme of the symbol pages.
library_page_path = symbol_page_path


def open_page(path: Path) -> TextIO:
    """Open a manual page for writing, creating its directory on first use.

    Args:
        path: Destination of the page.

    Returns:
        TextIO: Handle opened for writing in UTF-8.

    Raises:
        ResourceError: If the directory cannot be created or the file cannot
            be opened.

    Examples:
        with open_page(Path("man3/bfromcstr.3")) as page:
            page.write(".TH BFROMCSTR 3\\n")
    """
    ensure_directory(path.parent)
    try:
        return open(path, "w", encoding="UTF-8")
    except OSError as error:
        raise ResourceError(f"Could not open manpage file {path}: {error}", path) from error

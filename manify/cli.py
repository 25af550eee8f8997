"""
Generates manual pages from the Better String Library reference manual.
Writes one page for the library and one page per documented function or macro.
"""

from __future__ import annotations

import io
import sys
from pathlib import Path

import click
from .config import ConfigError, apply_overrides, build_config
from .exceptions import ManifyError
from .filesystem import get_max_file_size, read_manual, read_stream
from .scanner import convert_file, write_library_page, write_pages

__all__ = ["cli"]


@click.command()
@click.version_option()
@click.option(
    "-o",
    "--output",
    help="Library page destination ('-' for stdout) [default: <man-dir>/<library>.<section>]",
)
@click.option("--man-dir", help="Directory for the per-symbol pages")
@click.option("--section", help="Manual section")
@click.option("--symbol-prefixes", help="Characters a function or macro name may start with")
@click.option("--buffer-capacity", type=int, help="Largest block size in characters")
@click.option("-v", "--verbose", is_flag=True, help="Report each page written on stderr")
@click.argument("filepath", default="-", type=click.Path(dir_okay=False, allow_dash=True))
def cli(
    filepath: str,
    output: str | None = None,
    man_dir: str | None = None,
    section: str | None = None,
    symbol_prefixes: str | None = None,
    buffer_capacity: int | None = None,
    verbose: bool = False,
):
    """
    Entry point for converting a reference manual into manual pages.

    Args:
        filepath: Manual to convert, or `-` to read standard input.
        output: Destination of the library page, or `-` for standard output.
        man_dir: Override for the per-symbol page directory.
        section: Override for the manual section.
        symbol_prefixes: Override for the symbol-name prefix characters.
        buffer_capacity: Override for the block size limit.
        verbose: Whether to report each page written.

    Returns:
        None.

    Raises:
        click.BadParameter: If the configuration or an override is invalid.
        click.ClickException: If the manual cannot be read, is malformed, or
            a page cannot be written.

    Examples:
        manify bstrlib.txt --man-dir build/man3 -v
    """
    search_dir = Path.cwd() if filepath == "-" else Path(filepath).resolve().parent
    try:
        config = build_config(
            search_dir,
            man_dir=man_dir,
            section=section,
            symbol_prefixes=symbol_prefixes,
            buffer_capacity=buffer_capacity,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    config = apply_overrides(config, max_file_size=max_file_size)

    notify = (lambda message: click.echo(message, err=True)) if verbose else None
    target = Path(output) if output and output != "-" else None

    try:
        if filepath != "-" and output != "-":
            convert_file(Path(filepath), config, target, notify)
            return

        if filepath == "-":
            content = read_stream(sys.stdin, config.max_file_size)
        else:
            content = read_manual(Path(filepath), config.max_file_size)

        if output == "-":
            page = io.StringIO()
            write_pages(content, page, config, notify)
            click.echo(page.getvalue(), nl=False)
        else:
            write_library_page(content, config, target, notify)
    except ManifyError as error:
        raise click.ClickException(str(error)) from error


if __name__ == "__main__":
    cli()

"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import tomllib


@dataclass
class ManifyConfig:
    """Configuration for generating manual pages from a reference manual.

    Attributes:
        man_dir: Directory receiving the per-symbol pages and, by default,
            the library page.
        section: Manual section used in ``.TH`` lines and file suffixes.
        library_name: Name of the library page.
        library_description: Text of the library page's NAME section.
        symbol_description: Text of each per-symbol page's NAME section.
        title_banner: First line of the document-title banner.
        symbol_prefixes: Character-class body listing the letters a symbol
            name may start with.
        macro_prefix: Prefix of compilation macros described in the manual.
        makefile_marker: Variable whose assignment starts the Makefile example.
        acknowledgement_marker: Line that identifies the acknowledgements block.
        buffer_capacity: Largest block, in characters, a transform may produce.
        max_file_size: Maximum input file size in bytes.

    Examples:
        ManifyConfig(man_dir="build/man3", symbol_prefixes="bu")
    """

    # Output
    man_dir: str = "man3"
    section: str = "3"
    library_name: str = "bstrlib"
    library_description: str = "the better string library"
    symbol_description: str = "bstrlib function"

    # Input markers
    title_banner: str = "Better String library"
    symbol_prefixes: str = "bu"
    macro_prefix: str = "BSTRLIB_"
    makefile_marker: str = "BSTRDIR"
    acknowledgement_marker: str = "Bjorn Augestad"

    # Limits
    buffer_capacity: int = 5000
    max_file_size: int = 10 * 1024 * 1024


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`section` must be alphanumeric")
    """


_STRING_FIELDS = (
    "man_dir",
    "section",
    "library_name",
    "library_description",
    "symbol_description",
    "title_banner",
    "symbol_prefixes",
    "macro_prefix",
    "makefile_marker",
    "acknowledgement_marker",
)

_MISSING = object()


def load_config(search_path: Path) -> ManifyConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root,
    reading the ``[tool.manify]`` table from `pyproject.toml` and the
    ``[manify]`` or ``[tool.manify]`` table from `.manify.toml` when present.
    Returns default values when no configuration is found. TOML files that
    cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        ManifyConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "manify")]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / ".manify.toml",
            table_paths=[("manify",), ("tool", "manify")],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return ManifyConfig()


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> ManifyConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> ManifyConfig:
    table_display = ".".join(table_path)

    if raw_config is None or raw_config == {}:
        return ManifyConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    try:
        return ManifyConfig(**raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def validate_config(config: ManifyConfig) -> None:
    """Validate a `ManifyConfig` instance.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If a text field is empty or not a string, the section is
            not alphanumeric, the library name contains a path separator, or
            a numeric limit is not a positive integer.

    Examples:
        validate_config(ManifyConfig(section="3"))
    """
    for key in _STRING_FIELDS:
        value = getattr(config, key)
        if not isinstance(value, str):
            raise ConfigError(f"`{key}` must be a string")
        if not value:
            raise ConfigError(f"`{key}` must not be empty")

    if not config.section.isalnum():
        raise ConfigError("`section` must be alphanumeric")
    if "/" in config.library_name or "\\" in config.library_name:
        raise ConfigError("`library_name` must not contain path separators")

    limits = {
        "buffer_capacity": config.buffer_capacity,
        "max_file_size": config.max_file_size,
    }
    _ensure_integers(limits)
    _ensure_positive(limits)


def apply_overrides(config: ManifyConfig, **overrides: object) -> ManifyConfig:
    """Apply override values to a `ManifyConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values
            set to None are ignored.

    Returns:
        ManifyConfig: New configuration with the overrides applied, or the
        original configuration when nothing changes.

    Raises:
        TypeError: If an override name is not defined on `ManifyConfig`.

    Examples:
        updated = apply_overrides(config, man_dir="out", section=None)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> ManifyConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None
            values are ignored.

    Returns:
        ManifyConfig: Validated configuration ready for conversion.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), man_dir="build/man3")
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")

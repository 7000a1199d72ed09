"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import tomllib


@dataclass
class EditorConfig:
    """Configuration for an editing session.

    Attributes:
        history_size: Maximum number of undo steps kept per session.
        tab_width: Number of spaces inserted by the Tab key.
        max_file_size: Maximum file size in bytes the CLI will read.

    Examples:
        EditorConfig(history_size=50, tab_width=2)
    """

    history_size: int = 100
    tab_width: int = 4
    max_file_size: int = 10 * 1024 * 1024


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`history_size` must be a positive integer")
    """


def load_config(search_path: Path) -> EditorConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.md-editor]`` table from `pyproject.toml` and the
    ``[md-editor]`` or ``[tool.md-editor]`` table from `.md-editor.toml` when
    present. Returns default values when no configuration is found. TOML files
    that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        EditorConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but is not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "md-editor")]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / ".md-editor.toml",
            table_paths=[("md-editor",), ("tool", "md-editor")],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return EditorConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> EditorConfig | None:
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
) -> EditorConfig:
    table_display = ".".join(table_path)

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    # TOML keys use dashes; dataclass fields use underscores.
    normalized = {key.replace("-", "_"): value for key, value in raw_config.items()}
    try:
        return EditorConfig(**normalized)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def validate_config(config: EditorConfig) -> None:
    """Validate an `EditorConfig` instance.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If any field is not a positive integer.

    Examples:
        validate_config(EditorConfig(history_size=10))
    """
    values = {
        "history_size": config.history_size,
        "tab_width": config.tab_width,
        "max_file_size": config.max_file_size,
    }
    _ensure_integers(values)
    _ensure_positive(values)


def apply_overrides(config: EditorConfig, **overrides: object) -> EditorConfig:
    """Apply override values to an `EditorConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set
            to None are ignored.

    Returns:
        EditorConfig: New configuration with the overrides applied, or the
        original configuration when nothing changed.

    Raises:
        TypeError: If an override name is not defined on `EditorConfig`.
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> EditorConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None
            values are ignored.

    Returns:
        EditorConfig: Validated configuration.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), tab_width=2)
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

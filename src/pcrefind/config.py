"""
TOML-based config file loading for pcrefind.

Searches for `.pcrefind.toml`, `pcrefind.toml`, or `pyproject.toml [tool.pcrefind]`
walking up from the current directory. Config values are merged with CLI flags
using three-way precedence: explicit CLI flags > config file > built-in defaults.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

DEFAULT_ROOT = "/video"


@dataclass
class PcrefindConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    allowing the merge logic to distinguish "not configured" from "explicitly set
    to default value".
    """

    # Scan
    root: str | None = None
    recursive: bool | None = None
    include_hidden: bool | None = None
    # File discovery
    exclude: list[str] | None = None
    extend_exclude: list[str] | None = None
    files_max_size: int | None = None
    respect_gitignore: bool | None = None


# Config file names, in the order they are tried within one directory.
_CONFIG_FILENAMES = (".pcrefind.toml", "pcrefind.toml", "pyproject.toml")

# Tables whose keys are read as if they were written at the top level.
_SECTIONS = ("scan", "file-discovery")

_VALID_FIELDS = {f.name for f in fields(PcrefindConfig)}


class ConfigError(ValueError):
    """A config file could not be parsed or has a value of the wrong type."""


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e


def _settings_table(path: Path, data: dict[str, Any]) -> dict[str, Any] | None:
    """The pcrefind table of a parsed file. `None` for a pyproject.toml without one."""
    if path.name != "pyproject.toml":
        return data
    return data.get("tool", {}).get("pcrefind")


def _holds_settings(path: Path) -> bool:
    if path.name != "pyproject.toml":
        return True
    # A pyproject.toml that cannot be read belongs to some other tool.
    try:
        return _settings_table(path, _read_toml(path)) is not None
    except (ConfigError, OSError):
        return False


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.pcrefind.toml` >
    `pcrefind.toml` > `pyproject.toml` (only if it has `[tool.pcrefind]`).
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        for filename in _CONFIG_FILENAMES:
            candidate = directory / filename
            if candidate.is_file() and _holds_settings(candidate):
                return candidate
    return None


def load_config(config_path: Path) -> PcrefindConfig:
    """
    Load a `PcrefindConfig` from a standalone config file or from the
    `[tool.pcrefind]` table of a `pyproject.toml`.

    Raises `ConfigError` for malformed TOML or values of the wrong type.
    """
    table = _settings_table(config_path, _read_toml(config_path)) or {}
    config = _parse_config_data(table)
    _check_types(config, config_path)
    return config


def _parse_config_data(data: dict[str, Any]) -> PcrefindConfig:
    """
    Map a settings table onto `PcrefindConfig`. Keys in `[scan]` and
    `[file-discovery]` count as top-level keys, kebab-case keys are read as
    snake_case, and unknown keys are ignored.
    """
    settings = {key: value for key, value in data.items() if key not in _SECTIONS}
    for section in _SECTIONS:
        table = data.get(section)
        if isinstance(table, dict):
            settings.update(cast(dict[str, Any], table))

    values = {key.replace("-", "_"): value for key, value in settings.items()}
    return PcrefindConfig(**{key: value for key, value in values.items() if key in _VALID_FIELDS})


_FIELD_TYPES: dict[str, type] = {
    "root": str,
    "recursive": bool,
    "include_hidden": bool,
    "exclude": list,
    "extend_exclude": list,
    "files_max_size": int,
    "respect_gitignore": bool,
}


def _check_types(config: PcrefindConfig, config_path: Path) -> None:
    for name, expected in _FIELD_TYPES.items():
        value = getattr(config, name)
        if value is None:
            continue
        # bool is an int subclass; a size of `true` is still a mistake.
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ConfigError(
                f"{config_path}: `{name.replace('_', '-')}` should be of type "
                f"{expected.__name__}, got {value!r}"
            )


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: PcrefindConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(PcrefindConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue  # Not set in config

        # Skip if CLI explicitly set this flag
        if cfg_field.name in explicit_flags:
            continue

        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts

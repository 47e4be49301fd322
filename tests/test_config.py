"""Tests for config file loading and merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from pcrefind.cli import Options
from pcrefind.config import (
    ConfigError,
    PcrefindConfig,
    find_config_file,
    load_config,
    merge_cli_with_config,
)


def test_find_config_pcrefind_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pcrefind.toml"
    config_file.write_text('root = "/media"\n')
    assert find_config_file(tmp_path) == config_file


def test_find_config_dot_pcrefind_toml_takes_precedence(tmp_path: Path) -> None:
    (tmp_path / "pcrefind.toml").write_text('root = "/media"\n')
    dot_config = tmp_path / ".pcrefind.toml"
    dot_config.write_text('root = "/srv"\n')
    assert find_config_file(tmp_path) == dot_config


def test_find_config_pyproject_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text('[tool.pcrefind]\nroot = "/media"\n')
    assert find_config_file(tmp_path) == config_file


def test_find_config_pyproject_without_section_skipped(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.ruff]\nline-length = 100\n")
    assert find_config_file(tmp_path) is None


def test_find_config_walks_up(tmp_path: Path) -> None:
    config_file = tmp_path / "pcrefind.toml"
    config_file.write_text('root = "/media"\n')
    subdir = tmp_path / "sub" / "deep"
    subdir.mkdir(parents=True)
    assert find_config_file(subdir) == config_file


def test_find_config_none_when_missing(tmp_path: Path) -> None:
    assert find_config_file(tmp_path) is None


def test_load_config_sections_and_kebab_case(tmp_path: Path) -> None:
    config_file = tmp_path / "pcrefind.toml"
    config_file.write_text(
        "[scan]\n"
        'root = "/media/films"\n'
        "recursive = false\n"
        "include-hidden = false\n"
        "\n"
        "[file-discovery]\n"
        'extend-exclude = ["incoming/"]\n'
        "files-max-size = 500000\n"
        "respect-gitignore = false\n"
    )
    config = load_config(config_file)
    assert config.root == "/media/films"
    assert config.recursive is False
    assert config.include_hidden is False
    assert config.extend_exclude == ["incoming/"]
    assert config.files_max_size == 500000
    assert config.respect_gitignore is False
    # Unset fields should be None (not set)
    assert config.exclude is None


def test_load_config_pyproject_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text('[tool.pcrefind]\nroot = "/media"\nexclude = ["tmp/"]\n')
    config = load_config(config_file)
    assert config.root == "/media"
    assert config.exclude == ["tmp/"]


def test_load_config_ignores_unknown_keys(tmp_path: Path) -> None:
    config_file = tmp_path / "pcrefind.toml"
    config_file.write_text('root = "/media"\ncolour = "blue"\n')
    assert load_config(config_file) == PcrefindConfig(root="/media")


def test_load_config_bad_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pcrefind.toml"
    config_file.write_text("root = \n")
    with pytest.raises(ConfigError):
        load_config(config_file)


@pytest.mark.parametrize(
    "line",
    ["root = 3", 'recursive = "yes"', "files-max-size = true", 'exclude = "tmp/"'],
)
def test_load_config_wrong_type(tmp_path: Path, line: str) -> None:
    config_file = tmp_path / "pcrefind.toml"
    config_file.write_text(line + "\n")
    with pytest.raises(ConfigError):
        load_config(config_file)


def _make_options(
    root: str = "/video",
    recursive: bool = True,
    include_hidden: bool = True,
    exclude: list[str] | None = None,
    extend_exclude: list[str] | None = None,
    respect_gitignore: bool = True,
    files_max_size: int = 0,
) -> Options:
    """Create an Options with defaults for all required fields."""
    return Options(
        pattern="x",
        root=root,
        recursive=recursive,
        include_hidden=include_hidden,
        exclude=exclude,
        extend_exclude=extend_exclude if extend_exclude is not None else [],
        respect_gitignore=respect_gitignore,
        files_max_size=files_max_size,
        verbose=False,
        version=False,
    )


def test_merge_no_config() -> None:
    opts = _make_options()
    result = merge_cli_with_config(opts, config=None, explicit_flags=set())
    assert result.root == "/video"


def test_merge_config_overrides_defaults() -> None:
    opts = _make_options()
    config = PcrefindConfig(root="/media", recursive=False, extend_exclude=["incoming/"])
    result = merge_cli_with_config(opts, config, explicit_flags=set())
    assert result.root == "/media"
    assert result.recursive is False
    assert result.extend_exclude == ["incoming/"]
    assert result.respect_gitignore is True


def test_merge_explicit_flags_win() -> None:
    opts = _make_options(root="/video")
    config = PcrefindConfig(root="/media", files_max_size=10)
    result = merge_cli_with_config(opts, config, explicit_flags={"root"})
    assert result.root == "/video"
    assert result.files_max_size == 10


def test_load_config_reads_only_known_sections(tmp_path: Path) -> None:
    config_file = tmp_path / "pcrefind.toml"
    config_file.write_text('[scan]\nroot = "/media"\n\n[other]\nrecursive = false\n')
    assert load_config(config_file) == PcrefindConfig(root="/media")

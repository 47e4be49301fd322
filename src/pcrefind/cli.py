#!/usr/bin/env python3
"""
pcrefind: List the files under a directory whose path matches a PCRE pattern

Patterns are matched case-insensitively anywhere in the path, with Unicode
text and ASCII-only \\d, \\w and \\s.

Common usage:
  pcrefind '\\.mp4$'
  pcrefind --root ~/Videos '(?<show>simpsons|futurama).*s0[1-3]'
  pcrefind --no-recursive --root /video 'trailer'

A pattern that starts with `-` must follow `--`, as in `pcrefind -- '-1080p'`.

Settings can also come from `.pcrefind.toml`, `pcrefind.toml`, or
`[tool.pcrefind]` in `pyproject.toml`.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from pcrefind.config import (
    DEFAULT_ROOT,
    ConfigError,
    find_config_file,
    load_config,
    merge_cli_with_config,
)
from pcrefind.file_lister import FileLister, FileListerConfig
from pcrefind.finder import find_matching
from pcrefind.matcher import PatternMatcher

log = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the pcrefind tool."""

    pattern: str | None
    root: str
    recursive: bool
    include_hidden: bool
    exclude: list[str] | None
    extend_exclude: list[str]
    respect_gitignore: bool
    files_max_size: int
    verbose: bool
    version: bool


def _build_parser() -> argparse.ArgumentParser:
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "pattern",
        nargs="?",
        default=None,
        help="PCRE pattern to search for in each file path",
    )
    parser.add_argument(
        "-r",
        "--root",
        type=str,
        default=DEFAULT_ROOT,
        metavar="DIR",
        help="Directory to list (default: %(default)s)",
    )
    parser.add_argument(
        "--no-recursive",
        action="store_true",
        dest="no_recursive",
        help="List only the files directly inside the root directory",
    )
    parser.add_argument(
        "--no-hidden",
        action="store_true",
        dest="no_hidden",
        help="Skip files and directories whose name starts with a dot",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Replace all default exclusion patterns (gitignore syntax). Can be repeated",
    )
    parser.add_argument(
        "--extend-exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Add to default exclusion patterns (e.g., 'incoming/'). Can be repeated",
    )
    parser.add_argument(
        "--no-respect-gitignore",
        action="store_true",
        dest="no_respect_gitignore",
        help="Disable .gitignore integration",
    )
    parser.add_argument(
        "--files-max-size",
        type=int,
        default=0,
        dest="files_max_size",
        metavar="BYTES",
        help="Skip files larger than this size in bytes (0 = no limit, default: %(default)s)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    return parser


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks which
    flags the user explicitly passed (for config merge precedence).
    """
    opts = _build_parser().parse_args(args)

    # Re-parse with sentinel defaults to detect which flags were actually supplied,
    # even when the value passed equals the default.
    _SENTINEL = object()
    _tracked_flags: dict[str, str] = {
        # argparse dest name -> Options field name
        "root": "root",
        "no_recursive": "recursive",
        "no_hidden": "include_hidden",
        "exclude": "exclude",
        "extend_exclude": "extend_exclude",
        "no_respect_gitignore": "respect_gitignore",
        "files_max_size": "files_max_size",
    }
    sentinel_parser = argparse.ArgumentParser(add_help=False)
    sentinel_parser.add_argument("-r", "--root", default=_SENTINEL)
    sentinel_parser.add_argument(
        "--no-recursive", dest="no_recursive", action="store_true", default=_SENTINEL
    )
    sentinel_parser.add_argument(
        "--no-hidden", dest="no_hidden", action="store_true", default=_SENTINEL
    )
    # append actions use None as sentinel (argparse creates a list when the flag is used).
    sentinel_parser.add_argument("--exclude", action="append", default=None)
    sentinel_parser.add_argument("--extend-exclude", action="append", default=None)
    sentinel_parser.add_argument(
        "--no-respect-gitignore",
        dest="no_respect_gitignore",
        action="store_true",
        default=_SENTINEL,
    )
    sentinel_parser.add_argument("--files-max-size", dest="files_max_size", default=_SENTINEL)
    sentinel_opts, _ = sentinel_parser.parse_known_args(args if args is not None else sys.argv[1:])

    explicit_flags = {
        field_name
        for dest_name, field_name in _tracked_flags.items()
        if getattr(sentinel_opts, dest_name, None) not in (None, _SENTINEL)
    }

    return (
        Options(
            pattern=opts.pattern,
            root=opts.root,
            recursive=not opts.no_recursive,
            include_hidden=not opts.no_hidden,
            exclude=opts.exclude,
            extend_exclude=opts.extend_exclude,
            respect_gitignore=not opts.no_respect_gitignore,
            files_max_size=opts.files_max_size,
            verbose=opts.verbose,
            version=opts.version,
        ),
        explicit_flags,
    )


def _setup_logging(verbose: bool) -> logging.Handler:
    """Send `pcrefind` log records to the current stderr. Returns the handler added."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    package_logger = logging.getLogger("pcrefind")
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return handler


def _usage_line() -> str:
    return f"usage: {_build_parser().prog} <pcre pattern>"


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the pcrefind CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code: 0 for success (including no matches), 1 for an invalid pattern or
        config file, 2 if the root could not be listed
    """
    options, explicit_flags = _parse_args(args)
    handler = _setup_logging(options.verbose)
    try:
        return _run(options, explicit_flags)
    finally:
        logging.getLogger("pcrefind").removeHandler(handler)


def _run(options: Options, explicit_flags: set[str]) -> int:
    if options.version:
        try:
            version = importlib.metadata.version("pcrefind")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    # A missing pattern is not an error: show the short usage line and stop.
    if options.pattern is None:
        print(_usage_line())
        return 0

    config_path = find_config_file(Path.cwd())
    if config_path:
        log.debug("Using config file %s", config_path)
        try:
            config = load_config(config_path)
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        merge_cli_with_config(options, config, explicit_flags)

    matcher = PatternMatcher(options.pattern)
    if not matcher.ready:
        print(
            f"Error: invalid pattern {options.pattern!r}: {matcher.error_message}",
            file=sys.stderr,
        )
        return 1

    lister = FileLister(
        FileListerConfig(
            exclude=options.exclude,
            extend_exclude=options.extend_exclude,
            respect_gitignore=options.respect_gitignore,
            recursive=options.recursive,
            include_hidden=options.include_hidden,
            files_max_size=options.files_max_size,
        )
    )

    try:
        for path in find_matching(lister, os.path.expanduser(options.root), matcher):
            print(path)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Command line entry point for the smartwrap paragraph formatter."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Dict, Sequence, TextIO

from .editor.smart_format import format_markdown
from .formatting.errors import FormatError
from .services.settings import Settings, load_settings
from .utils import logging as logging_utils
from .utils.file_io import detect_newline, iter_markdown_files, normalize_line_endings, read_text, write_text

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_LOGGER = logging.getLogger(__name__)
_STDIN_MARKER = "-"

EXIT_OK = 0
EXIT_WOULD_CHANGE = 1
EXIT_ERROR = 2


def configure_logging(debug: bool = False, *, log_dir: str | None = None, force: bool = False) -> None:
    """Configure logging for a command line run."""

    level = logging.DEBUG if debug else logging.WARNING
    log_path = logging_utils.setup_logging(level, log_dir=log_dir, force=force)
    _LOGGER.debug("Logging configured (level=%s, file=%s)", logging.getLevelName(level), log_path)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the `smartwrap` console script."""

    args = _parse_cli_args(argv)
    debug = args.debug or _env_flag("SMARTWRAP_DEBUG", default=False)
    configure_logging(debug)

    try:
        overrides = _coerce_cli_overrides(args.overrides or [])
        if args.width is not None:
            overrides["wrap_width"] = args.width
        settings = load_settings(overrides=overrides or None)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if (settings.debug_logging and not debug) or settings.log_dir:
        debug = debug or settings.debug_logging
        configure_logging(debug, log_dir=settings.log_dir, force=True)

    paths = list(args.paths) or [_STDIN_MARKER]
    if paths == [_STDIN_MARKER]:
        return _format_stream(sys.stdin, sys.stdout, settings, check=args.check)

    changed: list[Path] = []
    failures = 0
    for path in iter_markdown_files(paths):
        try:
            if _format_file(path, settings, check=args.check, to_stdout=args.stdout):
                changed.append(path)
        except (OSError, UnicodeDecodeError, FormatError) as exc:
            _LOGGER.error("Failed to format %s: %s", path, exc)
            print(f"error: {path}: {exc}", file=sys.stderr)
            failures += 1

    if args.check:
        for path in changed:
            print(f"would reformat {path}")
    _LOGGER.debug("Processed %d file(s): %d changed, %d failed", len(paths), len(changed), failures)
    if failures:
        return EXIT_ERROR
    if args.check and changed:
        return EXIT_WOULD_CHANGE
    return EXIT_OK


def _format_file(path: Path, settings: Settings, *, check: bool, to_stdout: bool) -> bool:
    raw = read_text(path, normalize_newlines=False)
    newline = detect_newline(raw)
    text = normalize_line_endings(raw)
    formatted = format_markdown(text, settings)
    changed = formatted != text
    if to_stdout:
        sys.stdout.write(formatted)
    elif changed and not check:
        write_text(path, formatted, newline=newline)
        _LOGGER.info("Reformatted %s", path)
    return changed


def _format_stream(source: TextIO, target: TextIO, settings: Settings, *, check: bool) -> int:
    text = normalize_line_endings(source.read())
    try:
        formatted = format_markdown(text, settings)
    except FormatError as exc:
        print(f"error: <stdin>: {exc}", file=sys.stderr)
        return EXIT_ERROR
    if check:
        return EXIT_WOULD_CHANGE if formatted != text else EXIT_OK
    target.write(formatted)
    return EXIT_OK


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="smartwrap",
        description="Reflow Markdown paragraphs while preserving inline markup.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Markdown files or directories to format; '-' or nothing reads stdin.",
    )
    parser.add_argument("-w", "--width", type=int, help="Wrap width in columns (default: 80).")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report files that would change and exit with status 1 instead of rewriting them.",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Write formatted output to stdout instead of rewriting files.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        metavar="KEY=VALUE",
        help="Override a setting for this run (repeatable).",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    return parser.parse_args(argv)


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for item in items:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"expected KEY=VALUE, got {item!r}")
        overrides[key] = value.strip()
    return overrides


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _package_version() -> str:
    try:
        return metadata.version("smartwrap")
    except metadata.PackageNotFoundError:
        return "unknown"


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())

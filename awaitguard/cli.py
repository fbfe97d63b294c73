"""Command-line interface for awaitguard."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from awaitguard.config import settings
from awaitguard.core.parser import is_supported
from awaitguard.models.scan_models import FileInput, ScanResponse
from awaitguard.workers.scan_worker import ScanWorker

logger = logging.getLogger("awaitguard.cli")

SKIP_DIRS = {"node_modules", ".git", "__pycache__", ".venv", "venv", ".mypy_cache", "dist"}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="awaitguard")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check", help="Report un-awaited async calls in files or directories"
    )
    check_parser.add_argument("paths", nargs="+", help="Files or directories to check")
    check_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format (default: text)",
    )
    check_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log at the configured log level"
    )
    return parser


def collect_files(paths: list[Path]) -> list[Path]:
    """Expand directories into supported source files, in sorted order."""
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                if any(part in SKIP_DIRS for part in candidate.relative_to(path).parts):
                    continue
                if candidate.is_file() and is_supported(candidate.name):
                    files.append(candidate)
        elif path.is_file():
            files.append(path)
        else:
            raise FileNotFoundError(f"No such file or directory: {path}")
    return files


def _write_text(response: ScanResponse) -> None:
    report = response.report
    if report is None:
        return
    for issue in report.issues:
        sys.stdout.write(
            f"{issue.file}:{issue.line}:{issue.column + 1}: "
            f"{issue.severity} {issue.rule_id}/{issue.message_id} {issue.explanation}\n"
        )
    for path, errors in report.parse_errors.items():
        for error in errors:
            sys.stderr.write(f"{path}: {error}\n")
    sys.stdout.write(f"{report.summary}\n")


def _handle_check(paths: list[str], output_format: str) -> int:
    try:
        files = collect_files([Path(p).expanduser() for p in paths])
    except FileNotFoundError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    logger.info("Checking %d file(s)", len(files))

    inputs: list[FileInput] = []
    for path in files:
        try:
            inputs.append(FileInput(path=str(path), content=path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as exc:
            sys.stderr.write(f"error: cannot read {path}: {exc}\n")
            return 2

    response = ScanWorker().run_scan(inputs)
    if output_format == "json":
        sys.stdout.write(response.model_dump_json(indent=2) + "\n")
    else:
        _write_text(response)

    return 1 if response.report and response.report.issues else 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level.upper() if args.verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    if args.command == "check":
        return _handle_check(args.paths, args.format)

    return 2


if __name__ == "__main__":
    raise SystemExit(main())

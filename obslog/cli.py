"""Parse a build log and display a summary of its phases.

The log is read from a file, from stdin, or from the build service when both
a project and a package are given.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from obslog.buildlog import BuildLog, InvalidFilter, QueryResult
from obslog.config import load_config
from obslog.errors import BuildLogFetchError
from obslog.session import BuildLogSession

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    config = load_config()
    parser = argparse.ArgumentParser(
        prog="parse-log",
        description="Parse a build log from a file, stdin or the build service and display a summary of the build phases.",
    )
    parser.add_argument("file", nargs="?", help="Build log file (default: stdin)")
    parser.add_argument("-j", "--json", action="store_true", help="Output in JSON format")
    parser.add_argument("-p", "--project", default="", help="Project to fetch the build log from")
    parser.add_argument("-k", "--package", default="", help="Package to fetch the build log from")
    parser.add_argument("-a", "--arch", default=config.default_arch, help="Architecture of the build")
    parser.add_argument("-d", "--distro", default=config.default_repository, help="Distribution (repository) of the build")
    parser.add_argument("-l", "--lines", type=int, default=config.cli_lines, help="Number of log lines to print")
    parser.add_argument("-o", "--offset", type=int, default=0, help="Skip this many filtered lines")
    parser.add_argument("-s", "--succeeded", action="store_true", help="Also print the lines of succeeded phases")
    parser.add_argument("-m", "--match", default=None, help="Only print lines matching this regex")
    parser.add_argument("-x", "--exclude", default=None, help="Drop lines matching this regex")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-vv for debug)")
    args = parser.parse_args(argv)
    args.debug = config.debug
    return args


def _configure_logging(verbose: int, debug: bool) -> None:
    level = logging.WARNING
    if verbose >= 2 or debug:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")


def format_table(log: BuildLog) -> str:
    """Return a plain-text phase table for terminal output."""

    header = ("Phase", "Duration (s)", "Lines", "Status")
    rows = [
        (
            segment.phase.label,
            str(segment.duration),
            str(len(segment.lines)),
            "ok" if segment.succeeded else "FAILED",
        )
        for segment in log.segments
    ]
    widths = [max(len(row[col]) for row in [header, *rows]) for col in range(len(header))]
    rule = "+".join("-" * (width + 2) for width in widths)

    def _row(cells) -> str:
        return " | ".join(cell.ljust(width) for cell, width in zip(cells, widths))

    out = [
        f"Parsed build log for {log.project}/{log.name} on {log.distro}/{log.arch}",
        _row(header),
        rule,
    ]
    out.extend(_row(row) for row in rows)
    return "\n".join(out)


def format_lines(result: QueryResult) -> str:
    """Return the windowed log lines grouped by phase, plus a paging hint."""

    out: List[str] = []
    for view in result.phases:
        if view.lines:
            out.append(f"--- {view.phase} ---")
            out.extend(view.lines)
    if result.next_offset is not None:
        remaining = result.total_lines - result.next_offset
        out.append(f"... {remaining} more lines, continue with --offset {result.next_offset}")
    return "\n".join(out)


def _read_input(path: Optional[str]) -> str:
    """Read the raw log without newline translation; a lone CR stays inside its line."""

    if path:
        with open(path, encoding="utf-8", errors="replace", newline="") as handle:
            return handle.read()
    buffer = getattr(sys.stdin, "buffer", None)
    if buffer is None:
        return sys.stdin.read()
    return buffer.read().decode("utf-8", errors="replace")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point; returns the process exit status."""

    args = _parse_args(argv)
    _configure_logging(args.verbose, args.debug)
    session = BuildLogSession()

    if args.project and args.package:
        try:
            log = session.fetch(args.project, args.package, repository=args.distro, arch=args.arch)
        except BuildLogFetchError as exc:
            logger.error("couldn't fetch remote build log: %s", exc)
            return 1
    else:
        try:
            raw = _read_input(args.file)
        except OSError as exc:
            logger.error("couldn't read input: %s", exc)
            return 1
        name = Path(args.file).stem if args.file else "stdin"
        key = session.key_for(args.project or "local", args.package or name, arch=args.arch, distro=args.distro)
        log = session.load(key, raw)

    try:
        result = session.query(
            offset=args.offset,
            max_lines=args.lines,
            show_succeeded=args.succeeded,
            include_pattern=args.match,
            exclude_pattern=args.exclude,
        )
    except InvalidFilter as exc:
        logger.error("invalid filter: %s", exc)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(format_table(log))
    lines = format_lines(result)
    if lines:
        print()
        print(lines)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Bounded, filtered views over a parsed build log.

Callers such as an LLM agent must not receive multi-megabyte payloads, so a
query returns the per-phase summary for every segment but log lines only for
gated-in segments, filtered and cut to one page.

Usage:
    from obslog.buildlog import parse_log, query_log

    log = parse_log(raw)
    result = query_log(log, max_lines=200, include_pattern=r"error")
    if result.next_offset is not None:
        more = query_log(log, offset=result.next_offset, max_lines=200, include_pattern=r"error")
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

from pydantic import BaseModel, Field

from obslog.buildlog.models import BuildLog
from obslog.errors import InvalidFilter

DEFAULT_MAX_LINES = 1000


def _compile(pattern: Optional[str], kind: str) -> Optional[Pattern[str]]:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise InvalidFilter(f"invalid {kind} pattern {pattern!r}: {exc}", pattern=pattern) from exc


class Query(BaseModel):
    """Parameters of a single log query."""

    offset: int = 0
    max_lines: int = 0
    show_succeeded: bool = False
    include_pattern: Optional[str] = None
    exclude_pattern: Optional[str] = None

    def normalized(self, default_max_lines: int = DEFAULT_MAX_LINES) -> "Query":
        """Return a copy with a non-negative offset and a positive line cap."""

        return self.model_copy(
            update={
                "offset": max(self.offset, 0),
                "max_lines": self.max_lines if self.max_lines > 0 else default_max_lines,
            }
        )

    def compile(self) -> Tuple[Optional[Pattern[str]], Optional[Pattern[str]]]:
        """Return compiled (include, exclude) patterns or raise InvalidFilter."""

        if self.include_pattern and self.include_pattern == self.exclude_pattern:
            raise InvalidFilter(
                f"include and exclude pattern are both {self.include_pattern!r}; no line can match",
                pattern=self.include_pattern,
            )
        return _compile(self.include_pattern, "include"), _compile(self.exclude_pattern, "exclude")


class PhaseView(BaseModel):
    """Summary of one segment; ``lines`` and ``packages`` are set only for gated-in segments."""

    phase: str
    duration_seconds: int
    success: bool
    lines: Optional[List[str]] = None
    packages: Optional[List[str]] = None


class QueryResult(BaseModel):
    """Result of ``query_log``."""

    properties: Dict[str, str] = Field(default_factory=dict)
    phases: List[PhaseView] = Field(default_factory=list)
    offset: int = 0
    total_lines: int = 0
    returned_lines: int = 0
    next_offset: Optional[int] = None

    @property
    def truncated(self) -> bool:
        return self.next_offset is not None

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready structure; unset ``lines`` and ``packages`` keys are omitted."""

        return {
            "properties": dict(self.properties),
            "phases": [view.model_dump(exclude_none=True) for view in self.phases],
            "offset": self.offset,
            "total_lines": self.total_lines,
            "returned_lines": self.returned_lines,
            "next_offset": self.next_offset,
        }


def run_query(log: BuildLog, query: Query, default_max_lines: int = DEFAULT_MAX_LINES) -> QueryResult:
    """Apply ``query`` to ``log``.

    Lines of a segment are candidates only when the segment failed or
    ``show_succeeded`` is set. Candidate lines matching the exclude pattern are
    dropped, then only lines matching the include pattern are kept. The
    remaining lines of all segments form one stream that ``offset`` and
    ``max_lines`` page through.
    """

    query = query.normalized(default_max_lines)
    include, exclude = query.compile()
    start = query.offset
    end = query.offset + query.max_lines

    views: List[PhaseView] = []
    position = 0
    for segment in log.segments:
        lines: Optional[List[str]] = None
        packages: Optional[List[str]] = None
        if query.show_succeeded or not segment.succeeded:
            lines = []
            if segment.packages:
                packages = list(segment.packages)
            for line in segment.lines:
                if exclude is not None and exclude.search(line):
                    continue
                if include is not None and not include.search(line):
                    continue
                if start <= position < end:
                    lines.append(line)
                position += 1
        views.append(
            PhaseView(
                phase=segment.phase.label,
                duration_seconds=segment.duration,
                success=segment.succeeded,
                lines=lines,
                packages=packages,
            )
        )

    return QueryResult(
        properties=log.properties,
        phases=views,
        offset=start,
        total_lines=position,
        returned_lines=min(max(position - start, 0), query.max_lines),
        next_offset=end if end < position else None,
    )


def query_log(
    log: BuildLog,
    offset: int = 0,
    max_lines: int = 0,
    show_succeeded: bool = False,
    include_pattern: Optional[str] = None,
    exclude_pattern: Optional[str] = None,
    default_max_lines: int = DEFAULT_MAX_LINES,
) -> QueryResult:
    """Query a parsed log; see ``run_query``. Raises InvalidFilter on bad patterns."""

    query = Query(
        offset=offset,
        max_lines=max_lines,
        show_succeeded=show_succeeded,
        include_pattern=include_pattern,
        exclude_pattern=exclude_pattern,
    )
    return run_query(log, query, default_max_lines=default_max_lines)

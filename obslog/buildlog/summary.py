"""Success/failure verdicts and durations for build phase segments.

Success is decided per segment, with one exception: the Summary segment only
succeeds when no failure marker appeared anywhere in the log. A build can print
a clean "finished" line after an error in the Build phase.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import List, Sequence, Tuple

from obslog.buildlog.models import PhaseSegment
from obslog.buildlog.phases import Phase

_FAILURE_SUBSTRINGS = ("error:", "failed:")
_FAILURE_TOKENS = re.compile(r"\b(?:FAILED|ERROR)\b")

# [    2s] [1/173] keeping compat-usrmerge-tools-84.87-5.22
_PACKAGE_RE = re.compile(r"\[\s*\d+/\d+\]\s+(?:keeping|installing)\s+(\S.*)")


def is_failure_line(line: str) -> bool:
    """Return True when the line carries a build failure marker."""

    lowered = line.lower()
    if any(marker in lowered for marker in _FAILURE_SUBSTRINGS):
        return True
    return bool(_FAILURE_TOKENS.search(line))


def installed_packages(lines: Sequence[str]) -> Tuple[str, ...]:
    """Return the packages named by "[i/n] keeping" or "[i/n] installing" lines."""

    packages = []
    for line in lines:
        match = _PACKAGE_RE.search(line)
        if match:
            packages.append(match.group(1).strip())
    return tuple(packages)


def close_segment(
    phase: Phase,
    lines: Sequence[str],
    start_time: int,
    end_time: int,
    succeeded: bool,
) -> PhaseSegment:
    """Build the finished segment; clock anomalies clamp the duration to 0."""

    return PhaseSegment(
        phase=phase,
        lines=tuple(lines),
        start_time=start_time,
        duration=max(0, end_time - start_time),
        succeeded=succeeded,
        packages=installed_packages(lines) if phase == Phase.PACKAGE_INSTALLATION else (),
    )


def apply_summary_verdict(segments: List[PhaseSegment], has_any_error: bool) -> List[PhaseSegment]:
    """Mark Summary segments failed when any line of the log failed."""

    if not has_any_error:
        return segments
    return [
        replace(segment, succeeded=False) if segment.phase == Phase.SUMMARY else segment
        for segment in segments
    ]

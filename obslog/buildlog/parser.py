"""Single-pass segmentation of raw build logs into phases."""

from __future__ import annotations

import logging
from typing import List

from obslog.buildlog.metadata import MetadataExtractor
from obslog.buildlog.models import BuildLog, PhaseSegment
from obslog.buildlog.phases import Phase, extract_time, next_phase
from obslog.buildlog.summary import apply_summary_verdict, close_segment, is_failure_line

logger = logging.getLogger(__name__)


def split_lines(text: str) -> List[str]:
    """Split on newlines, dropping trailing CRs and the empty tail after a final newline."""

    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.rstrip("\r") for line in lines]


def parse_log(raw: str) -> BuildLog:
    """Parse a raw build log into phase segments.

    Every line lands in exactly one segment, in input order. Input without any
    recognizable signature yields a single Header segment. The first segment is
    always Header, empty when the first line already opens a later phase.
    Never raises.
    """

    meta = MetadataExtractor()
    segments: List[PhaseSegment] = []

    phase = Phase.HEADER
    lines: List[str] = []
    segment_ok = True
    segment_start = 0
    last_time = 0
    has_any_error = False

    for line in split_lines(raw):
        seconds = extract_time(line)
        if seconds is not None:
            last_time = seconds

        meta.feed(line)

        new_phase = next_phase(phase, line)
        if new_phase != phase:
            segments.append(close_segment(phase, lines, segment_start, last_time, segment_ok))
            phase = new_phase
            lines = []
            segment_ok = True
            segment_start = last_time

        if is_failure_line(line):
            segment_ok = False
            has_any_error = True
        lines.append(line)

    segments.append(close_segment(phase, lines, segment_start, last_time, segment_ok))
    segments = apply_summary_verdict(segments, has_any_error)

    logger.debug(
        "parsed build log for %s/%s: %d segments, failed=%s",
        meta.project or "-",
        meta.name or "-",
        len(segments),
        has_any_error,
    )
    return BuildLog(segments=tuple(segments), raw_text=raw, **meta.as_dict())

"""Immutable parse products: phase segments and the build log itself."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from obslog.buildlog.phases import Phase


@dataclass(frozen=True)
class PhaseSegment:
    """A contiguous run of log lines belonging to one build phase.

    Attributes:
        phase: Phase the lines belong to
        lines: Log lines, verbatim, including the line that opened the phase
        start_time: Elapsed build seconds when the phase began
        duration: Seconds spent in the phase, never negative
        succeeded: False when a failure marker was seen (see ``summary``)
        packages: Packages placed in the build root; filled for
            PackageInstallation segments only
    """
    phase: Phase
    lines: Tuple[str, ...]
    start_time: int = 0
    duration: int = 0
    succeeded: bool = True
    packages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BuildLog:
    """Parsed build log: build identity plus ordered phase segments."""
    name: str
    project: str
    distro: str
    arch: str
    segments: Tuple[PhaseSegment, ...]
    raw_text: str = ""

    @property
    def properties(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "project": self.project,
            "distro": self.distro,
            "arch": self.arch,
        }

    @property
    def succeeded(self) -> bool:
        """True when every segment succeeded."""
        return all(segment.succeeded for segment in self.segments)

    def lines(self) -> Iterator[str]:
        """Yield all lines in log order."""
        for segment in self.segments:
            yield from segment.lines

    def text(self) -> str:
        """Return the segmented lines as newline-terminated text; parsing it yields the same segments."""
        return "".join(line + "\n" for line in self.lines())

    def segment(self, phase: Phase) -> Optional[PhaseSegment]:
        """Return the first segment of ``phase`` or None."""
        for segment in self.segments:
            if segment.phase == phase:
                return segment
        return None

    def failed_phases(self) -> Tuple[Phase, ...]:
        return tuple(segment.phase for segment in self.segments if not segment.succeeded)

    def to_dict(self, **query: Any) -> Dict[str, Any]:
        """Return the JSON-ready query result; keyword arguments go to ``query_log``."""
        from obslog.buildlog.query import query_log

        return query_log(self, **query).to_dict()

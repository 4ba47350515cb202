"""Build phases and the line signatures that open them.

The table is ordered by the build lifecycle. ``next_phase`` only ever looks at
phases after the current one, so segmentation is forward-only: a late line
that resembles an earlier phase's signature never moves the scanner back.
"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Optional, Pattern, Tuple


class Phase(IntEnum):
    """Build phases in lifecycle order."""
    HEADER = 0
    PREINSTALL = 1
    COPYING_PACKAGES = 2
    VM_BOOT = 3
    PACKAGE_CUMULATION = 4
    PACKAGE_INSTALLATION = 5
    BUILD = 6
    POST_BUILD_CHECKS = 7
    RPMLINT_REPORT = 8
    PACKAGE_COMPARISON = 9
    SUMMARY = 10
    RETRIES = 11

    @property
    def label(self) -> str:
        """Name used in JSON output, e.g. ``PostBuildChecks``."""
        return _LABELS[self]


_LABELS = {
    Phase.HEADER: "Header",
    Phase.PREINSTALL: "Preinstall",
    Phase.COPYING_PACKAGES: "CopyingPackages",
    Phase.VM_BOOT: "VMBoot",
    Phase.PACKAGE_CUMULATION: "PackageCumulation",
    Phase.PACKAGE_INSTALLATION: "PackageInstallation",
    Phase.BUILD: "Build",
    Phase.POST_BUILD_CHECKS: "PostBuildChecks",
    Phase.RPMLINT_REPORT: "RPMLintReport",
    Phase.PACKAGE_COMPARISON: "PackageComparison",
    Phase.SUMMARY: "Summary",
    Phase.RETRIES: "Retries",
}


# "[   12s] " prefix written by the build script in front of every line.
_TS = r"^\[\s*\d+s\]\s+"

_TIME_RE = re.compile(r"^\[\s*(\d+)s\]")

# Index in this tuple equals the phase value.
PHASE_SIGNATURES: Tuple[Tuple[Phase, Pattern[str]], ...] = (
    (Phase.HEADER, re.compile(r"^\[")),
    (Phase.PREINSTALL, re.compile(_TS + r"(?:\[[\s\d/]+\] preinstalling|init_buildsystem\b)")),
    (Phase.COPYING_PACKAGES, re.compile(_TS + r"copying packages\.")),
    (Phase.VM_BOOT, re.compile(_TS + r"booting kvm\.")),
    (Phase.PACKAGE_CUMULATION, re.compile(_TS + r"\[[\s\d/]+\] cumulate")),
    (
        Phase.PACKAGE_INSTALLATION,
        re.compile(_TS + r"(?:now installing cumulated packages|querying package ids\.\.\.)"),
    ),
    (Phase.BUILD, re.compile(_TS + r"(?:-{65}|Running build time source services\.\.\.)")),
    (Phase.POST_BUILD_CHECKS, re.compile(_TS + r"\.\.\. checking for files with abuild user/group")),
    (Phase.RPMLINT_REPORT, re.compile(_TS + r"RPMLINT report:")),
    (Phase.PACKAGE_COMPARISON, re.compile(_TS + r"\.\.\. comparing built packages with the former built")),
    (Phase.SUMMARY, re.compile(_TS + r"(?:\S+ )?finished \"build .+\"")),
    (Phase.RETRIES, re.compile(r"^Retried build at")),
)


def next_phase(current: Phase, line: str) -> Phase:
    """Return the first later phase whose signature matches ``line``.

    Only phases with an index strictly greater than ``current`` are tried;
    when none matches, ``current`` is returned unchanged.
    """

    for phase, matcher in PHASE_SIGNATURES[current + 1 :]:
        if matcher.search(line):
            return phase
    return current


def extract_time(line: str) -> Optional[int]:
    """Return the elapsed seconds of a leading ``[ Ns]`` token, if present."""

    match = _TIME_RE.match(line)
    if not match:
        return None
    return int(match.group(1))

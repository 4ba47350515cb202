"""Build identity extraction from log header lines.

Three patterns are tried, in order of precedence:

1. ``Building <name> for project '<project>' repository '<distro>' arch '<arch>'``
   written by the build service worker,
2. ``started "build <name>.spec"`` written by local ``osc build`` runs, which
   sets the project to ``local``,
3. ``BUILD_ROOT=.../<distro>-<arch>``, only when ``<arch>`` is a known
   architecture; a plain ``/var/tmp/build-root`` names no target.

For each field the first match of the highest-precedence pattern wins. Remote
logs print the "started" line before the "Building" line, so a lower pattern
may fill a field that a higher one replaces later, never the reverse.
"""

from __future__ import annotations

import re
from typing import Dict

LOCAL_PROJECT = "local"

_REMOTE_BUILD_RE = re.compile(r"Building (\S+) for project '(\S+)' repository '(\S+)' arch '(\S+)'")
_LOCAL_BUILD_RE = re.compile(r"started \"build (\S+?)\.spec\"")
_BUILD_ROOT_RE = re.compile(r"BUILD_ROOT=[\"']?([^\s\"']+)")
_KNOWN_ARCHES = frozenset(
    ("aarch64", "armv6l", "armv7l", "i586", "i686", "loongarch64", "ppc64", "ppc64le",
     "riscv64", "s390x", "x86_64")
)

_FIELDS = ("name", "project", "distro", "arch")
_UNSET = len(_FIELDS)


class MetadataExtractor:
    """Collect name, project, distro and arch from a stream of log lines."""

    def __init__(self) -> None:
        self._values: Dict[str, str] = {field: "" for field in _FIELDS}
        self._rank: Dict[str, int] = {field: _UNSET for field in _FIELDS}

    @property
    def name(self) -> str:
        return self._values["name"]

    @property
    def project(self) -> str:
        return self._values["project"]

    @property
    def distro(self) -> str:
        return self._values["distro"]

    @property
    def arch(self) -> str:
        return self._values["arch"]

    @property
    def complete(self) -> bool:
        """True once every field came from the remote build line."""
        return all(rank == 0 for rank in self._rank.values())

    def _fill(self, rank: int, **values: str) -> None:
        for field, value in values.items():
            if value and rank < self._rank[field]:
                self._values[field] = value
                self._rank[field] = rank

    def feed(self, line: str) -> None:
        """Apply every pattern to ``line``."""

        if self.complete:
            return

        match = _REMOTE_BUILD_RE.search(line)
        if match:
            self._fill(0, name=match.group(1), project=match.group(2), distro=match.group(3), arch=match.group(4))

        match = _LOCAL_BUILD_RE.search(line)
        if match:
            self._fill(1, name=match.group(1), project=LOCAL_PROJECT)

        match = _BUILD_ROOT_RE.search(line)
        if match:
            root = match.group(1).rstrip("/").rsplit("/", 1)[-1]
            distro, _, arch = root.rpartition("-")
            if distro and arch in _KNOWN_ARCHES:
                self._fill(2, distro=distro, arch=arch)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)

"""In-memory cache of the most recent parsed log per build.

The cache is owned by whoever drives builds (a server session, the CLI). The
parser never reads or writes it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from obslog.buildlog.models import BuildLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildKey:
    """Identity of one build: project, package, architecture, distribution."""

    project: str
    package: str
    arch: str
    distro: str

    def __str__(self) -> str:
        return f"{self.project}/{self.package}:{self.arch}:{self.distro}"


class BuildLogCache:
    """Thread-safe map from build identity to its latest BuildLog."""

    def __init__(self) -> None:
        self._store: Dict[BuildKey, BuildLog] = {}
        self._last_key: Optional[BuildKey] = None
        self._lock = threading.Lock()

    def put(self, key: BuildKey, log: BuildLog) -> None:
        """Store ``log``, replacing any earlier log of the same build."""

        with self._lock:
            replaced = key in self._store
            self._store[key] = log
            self._last_key = key
        logger.debug("cached build log %s (replaced=%s)", key, replaced)

    def get(self, key: BuildKey) -> Optional[BuildLog]:
        with self._lock:
            return self._store.get(key)

    @property
    def last_key(self) -> Optional[BuildKey]:
        with self._lock:
            return self._last_key

    def last(self) -> Optional[BuildLog]:
        """Return the log stored most recently, if it is still cached."""

        with self._lock:
            if self._last_key is None:
                return None
            return self._store.get(self._last_key)

    def keys(self) -> List[BuildKey]:
        with self._lock:
            return list(self._store)

    def remove(self, key: BuildKey) -> Optional[BuildLog]:
        with self._lock:
            log = self._store.pop(key, None)
            if self._last_key == key:
                self._last_key = None
            return log

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._last_key = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

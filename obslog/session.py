"""Build-log session: owns configuration and the per-build log cache.

This is the collaborator that hands raw text to the parser and keeps the
latest parse per build identity. Tool endpoints and the CLI go through it.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from obslog.buildlog import BuildLog, QueryResult, parse_log, query_log
from obslog.cache import BuildKey, BuildLogCache
from obslog.config import Config, load_config
from obslog.tools.obs_client import fetch_build_log

logger = logging.getLogger(__name__)


class BuildLogSession:
    """Parse, cache and query build logs for one serving session."""

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config or load_config()
        self.cache = BuildLogCache()

    def key_for(
        self,
        project: str,
        package: str,
        arch: Optional[str] = None,
        distro: Optional[str] = None,
    ) -> BuildKey:
        return BuildKey(
            project=project,
            package=package,
            arch=arch or self.config.default_arch,
            distro=distro or self.config.default_repository,
        )

    def load(self, key: BuildKey, raw: str) -> BuildLog:
        """Parse ``raw`` and store it as the latest log of ``key``."""

        log = parse_log(raw)
        self.cache.put(key, log)
        return log

    def fetch(
        self,
        project: str,
        package: str,
        repository: Optional[str] = None,
        arch: Optional[str] = None,
    ) -> BuildLog:
        """Download, parse and cache the remote log of one build."""

        key = self.key_for(project, package, arch=arch, distro=repository)
        raw = fetch_build_log(project, package, repository=key.distro, arch=key.arch, config=self.config)
        return self.load(key, raw)

    def get(self, key: Optional[BuildKey] = None) -> Optional[BuildLog]:
        """Return the cached log for ``key``, or the last stored log."""

        if key is None:
            return self.cache.last()
        return self.cache.get(key)

    def query(self, key: Optional[BuildKey] = None, **params: Any) -> Optional[QueryResult]:
        """Query a cached log; ``params`` are passed to ``query_log``.

        Returns None when nothing is cached for ``key``. Raises InvalidFilter
        for malformed patterns.
        """

        log = self.get(key)
        if log is None:
            logger.info("no cached build log for %s", key or "last build")
            return None
        params.setdefault("default_max_lines", self.config.query_max_lines)
        return query_log(log, **params)


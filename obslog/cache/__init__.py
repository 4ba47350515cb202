"""Caches owned by build drivers."""

from obslog.cache.build_log_cache import BuildKey, BuildLogCache

__all__ = ["BuildKey", "BuildLogCache"]

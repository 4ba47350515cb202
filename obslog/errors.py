"""Structured error taxonomy for build-log handling.

Parsing never fails; errors only come from malformed query input and from the
collaborators that fetch logs.

Usage:
    from obslog.errors import InvalidFilter, BuildLogFetchError

    try:
        result = query_log(log, include_pattern=pattern)
    except InvalidFilter as exc:
        ask_for_new_pattern(exc.pattern)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

@dataclass
class ErrorContext:
    """Contextual metadata for errors."""
    project: Optional[str] = None
    package: Optional[str] = None
    url: Optional[str] = None
    severity: str = "error"  # warning, error, critical
    recoverable: bool = True

class ObsLogError(Exception):
    """Base class for all obslog errors."""
    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.context = context or ErrorContext()
        self.error_code = "GENERIC_ERROR"

# --- Query Errors ---

class QueryError(ObsLogError):
    """Base for errors raised while querying a parsed log."""
    pass

class InvalidFilter(QueryError):
    """Filter pattern is not a valid regex or the filter combination is unusable."""
    def __init__(self, message: str, pattern: Optional[str] = None, context: Optional[ErrorContext] = None):
        super().__init__(message, context)
        self.error_code = "INVALID_FILTER"
        self.pattern = pattern

# --- Infrastructure Errors (HTTP, build service) ---

class InfrastructureError(ObsLogError):
    """Base for network/build service errors."""
    pass

class BuildLogFetchError(InfrastructureError):
    """Remote build log could not be retrieved."""
    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: str = "",
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message, context)
        self.error_code = "FETCH_FAIL"
        self.status = status
        self.body = body
        if status is not None and 400 <= status < 500:
            self.context.recoverable = False

"""Build-log segmentation and query engine."""

from obslog.buildlog.models import BuildLog, PhaseSegment
from obslog.buildlog.parser import parse_log
from obslog.buildlog.phases import Phase, next_phase
from obslog.buildlog.query import InvalidFilter, Query, QueryResult, query_log, run_query

__all__ = [
    "BuildLog",
    "InvalidFilter",
    "Phase",
    "PhaseSegment",
    "Query",
    "QueryResult",
    "next_phase",
    "parse_log",
    "query_log",
    "run_query",
]

"""Gating, filtering and pagination checks for query_log."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from obslog.buildlog import InvalidFilter, Phase, Query, parse_log, query_log, run_query
from obslog.buildlog.query import DEFAULT_MAX_LINES

DATA_DIR = Path(__file__).resolve().parent / "data"
RULE = "-" * 65

FAILED_BUILD = "\n".join(
    [
        "[ 0s] Building foo for project 'devel:tools' repository 'openSUSE_Tumbleweed' arch 'x86_64' srcmd5 '1'",
        "[ 1s] [1/1] preinstalling bash...",
        "[ 2s] copying packages...",
        f"[ 3s] {RULE}",
        "[ 4s] gcc -c foo.c",
        "[ 5s] foo.c:3: error: expected ';'",
        "[ 6s] make: *** [all] Error 1",
        "[ 7s] ... checking for files with abuild user/group",
        "[ 8s] RPMLINT report:",
    ]
)


def _read(name: str) -> str:
    return (DATA_DIR / name).read_text(encoding="utf-8")


def _window_lines(result):
    return [line for view in result.phases for line in (view.lines or [])]


def test_gating_returns_lines_of_failed_phase_only():
    log = parse_log(FAILED_BUILD)
    assert log.failed_phases() == (Phase.BUILD,)

    result = query_log(log)
    with_lines = [view.phase for view in result.phases if view.lines]
    assert with_lines == ["Build"]
    assert [view.phase for view in result.phases] == [
        "Header",
        "Preinstall",
        "CopyingPackages",
        "Build",
        "PostBuildChecks",
        "RPMLintReport",
    ]
    assert result.total_lines == 4
    assert result.next_offset is None


def test_summary_triples_are_always_returned():
    log = parse_log(_read("remote_gflags.log"))
    result = query_log(log)

    assert len(result.phases) == len(log.segments)
    assert all(view.lines is None for view in result.phases)
    assert result.total_lines == 0
    assert result.returned_lines == 0
    build = result.phases[6]
    assert (build.phase, build.duration_seconds, build.success) == ("Build", 22, True)


def test_show_succeeded_includes_every_line():
    raw = _read("remote_gflags.log")
    log = parse_log(raw)
    result = query_log(log, show_succeeded=True)

    assert _window_lines(result) == list(log.lines())
    assert result.total_lines == 35
    assert result.returned_lines == 35


def test_exclude_then_include():
    log = parse_log(FAILED_BUILD)
    result = query_log(log, include_pattern=r"rror", exclude_pattern=r"make:")
    assert _window_lines(result) == ["[ 5s] foo.c:3: error: expected ';'"]

    result = query_log(log, include_pattern=r"^\[ [45]s\]")
    assert _window_lines(result) == ["[ 4s] gcc -c foo.c", "[ 5s] foo.c:3: error: expected ';'"]


def test_gated_in_phase_without_matches_has_empty_lines():
    log = parse_log(FAILED_BUILD)
    result = query_log(log, include_pattern="no such line")
    build = [view for view in result.phases if view.phase == "Build"][0]
    assert build.lines == []
    assert result.total_lines == 0


def test_pagination_covers_stream_without_gaps():
    log = parse_log(_read("remote_gflags.log"))
    expected = list(log.lines())

    page_size = 4
    collected = []
    offset = 0
    pages = 0
    while True:
        result = query_log(log, offset=offset, max_lines=page_size, show_succeeded=True)
        lines = _window_lines(result)
        assert len(lines) == result.returned_lines
        assert len(lines) <= page_size
        collected.extend(lines)
        pages += 1
        if result.next_offset is None:
            break
        offset = result.next_offset

    assert collected == expected
    assert pages == 9


def test_pagination_with_filter():
    log = parse_log(_read("remote_gflags.log"))
    full = _window_lines(query_log(log, show_succeeded=True, include_pattern=r"s\] \["))
    first = query_log(log, max_lines=2, show_succeeded=True, include_pattern=r"s\] \[")
    second = query_log(log, offset=2, max_lines=2, show_succeeded=True, include_pattern=r"s\] \[")
    rest = query_log(log, offset=4, max_lines=2, show_succeeded=True, include_pattern=r"s\] \[")

    assert len(full) == 5
    assert first.truncated and second.truncated and not rest.truncated
    assert _window_lines(first) + _window_lines(second) + _window_lines(rest) == full


def test_offset_past_end():
    log = parse_log(FAILED_BUILD)
    result = query_log(log, offset=50, max_lines=10)
    assert _window_lines(result) == []
    assert result.total_lines == 4
    assert result.returned_lines == 0
    assert result.next_offset is None


def test_defaults_for_out_of_range_values():
    query = Query(offset=-3, max_lines=0).normalized()
    assert query.offset == 0
    assert query.max_lines == DEFAULT_MAX_LINES

    log = parse_log(FAILED_BUILD)
    result = query_log(log, offset=-3, max_lines=-1)
    assert result.offset == 0
    assert result.returned_lines == 4

    capped = query_log(log, max_lines=0, default_max_lines=3)
    assert capped.returned_lines == 3
    assert capped.next_offset == 3


def test_invalid_pattern_raises():
    log = parse_log(FAILED_BUILD)
    with pytest.raises(InvalidFilter) as excinfo:
        query_log(log, include_pattern="(unclosed")
    assert excinfo.value.pattern == "(unclosed"
    assert excinfo.value.error_code == "INVALID_FILTER"

    with pytest.raises(InvalidFilter):
        query_log(log, exclude_pattern="[z-a]")


def test_identical_include_and_exclude_rejected():
    log = parse_log(FAILED_BUILD)
    with pytest.raises(InvalidFilter):
        run_query(log, Query(include_pattern="error", exclude_pattern="error"))


def test_empty_patterns_are_ignored():
    log = parse_log(FAILED_BUILD)
    result = query_log(log, include_pattern="", exclude_pattern="")
    assert result.total_lines == 4


def test_to_dict_shape_is_json_ready():
    log = parse_log(FAILED_BUILD)
    data = log.to_dict(max_lines=2)

    assert data["properties"] == {
        "name": "foo",
        "project": "devel:tools",
        "distro": "openSUSE_Tumbleweed",
        "arch": "x86_64",
    }
    build = [phase for phase in data["phases"] if phase["phase"] == "Build"][0]
    assert build == {
        "phase": "Build",
        "duration_seconds": 4,
        "success": False,
        "lines": [f"[ 3s] {RULE}", "[ 4s] gcc -c foo.c"],
    }
    header = data["phases"][0]
    assert "lines" not in header
    assert data["next_offset"] == 2
    assert data["total_lines"] == 4
    json.dumps(data)


def test_packages_follow_phase_gating():
    log = parse_log(
        "[0s] init_buildsystem\n"
        "[1s] querying package ids...\n"
        "[2s] [1/2] keeping bash-5.2.37-1.1\n"
        "[2s] [2/2] keeping gcc14-14.2.1\n"
        "[3s] Running build time source services...\n"
    )

    install = [phase for phase in log.to_dict()["phases"] if phase["phase"] == "PackageInstallation"][0]
    assert "packages" not in install

    data = log.to_dict(show_succeeded=True)
    install = [phase for phase in data["phases"] if phase["phase"] == "PackageInstallation"][0]
    assert install["packages"] == ["bash-5.2.37-1.1", "gcc14-14.2.1"]
    assert "packages" not in data["phases"][-1]

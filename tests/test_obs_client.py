"""Remote build log fetch checks; no network access."""

from __future__ import annotations

import pytest
import requests

from obslog.config import Config
from obslog.errors import BuildLogFetchError
from obslog.tools import obs_client
from obslog.tools.obs_client import build_log_url, fetch_build_log


def _config(**overrides) -> Config:
    values = dict(
        obs_api_url="api.example.org",
        obs_user="alice",
        obs_password="secret",
        default_repository="openSUSE_Tumbleweed",
        default_arch="x86_64",
        request_timeout_sec=5,
        request_retries=0,
        verify_ssl=True,
        query_max_lines=1000,
        cli_lines=100,
        debug=False,
    )
    values.update(overrides)
    return Config(**values)


class _FakeResponse:
    def __init__(self, status_code: int, content: bytes) -> None:
        self.status_code = status_code
        self.content = content
        self.text = content.decode("utf-8", errors="replace")


class _FakeSession:
    def __init__(self, response=None, exc=None) -> None:
        self.response = response
        self.exc = exc
        self.calls = []
        self.auth = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response


def _install(monkeypatch, session: _FakeSession) -> None:
    def _fake_session(cfg):
        session.auth = (cfg.obs_user, cfg.obs_password)
        return session

    monkeypatch.setattr(obs_client, "_session", _fake_session)


def test_build_log_url():
    assert (
        build_log_url("api.opensuse.org", "home:alice", "openSUSE_Tumbleweed", "x86_64", "foo")
        == "https://api.opensuse.org/build/home:alice/openSUSE_Tumbleweed/x86_64/foo/_log"
    )
    assert build_log_url("http://localhost:3000/", "p", "r", "a", "k") == "http://localhost:3000/build/p/r/a/k/_log"


def test_fetch_uses_defaults_and_auth(monkeypatch):
    config = _config()
    session = _FakeSession(response=_FakeResponse(200, b"[0s] hello\n"))
    _install(monkeypatch, session)

    text = fetch_build_log("home:alice", "foo", config=config)

    assert text == "[0s] hello\n"
    url, kwargs = session.calls[0]
    assert url == "https://api.example.org/build/home:alice/openSUSE_Tumbleweed/x86_64/foo/_log"
    assert kwargs["timeout"] == 5
    assert session.auth == ("alice", "secret")


def test_fetch_decodes_invalid_utf8(monkeypatch):
    config = _config()
    _install(monkeypatch, _FakeSession(response=_FakeResponse(200, b"ok \xff\n")))
    assert fetch_build_log("p", "k", repository="r", arch="a", config=config) == "ok \ufffd\n"


def test_fetch_non_200(monkeypatch):
    config = _config()
    _install(monkeypatch, _FakeSession(response=_FakeResponse(404, b"unknown package")))

    with pytest.raises(BuildLogFetchError) as excinfo:
        fetch_build_log("p", "k", config=config)
    assert excinfo.value.status == 404
    assert excinfo.value.body == "unknown package"
    assert excinfo.value.context.recoverable is False
    assert excinfo.value.context.package == "k"


def test_fetch_transport_error(monkeypatch):
    config = _config()
    _install(monkeypatch, _FakeSession(exc=requests.ConnectionError("refused")))

    with pytest.raises(BuildLogFetchError) as excinfo:
        fetch_build_log("p", "k", config=config)
    assert excinfo.value.status is None
    assert excinfo.value.error_code == "FETCH_FAIL"


def test_fetch_requires_project_and_package():
    with pytest.raises(ValueError):
        fetch_build_log("", "k", config=_config())
    with pytest.raises(ValueError):
        fetch_build_log("p", "", config=_config())


def test_real_session_carries_auth_and_retries():
    session = obs_client._session(_config(request_retries=2))
    try:
        assert session.auth == ("alice", "secret")
        assert session.get_adapter("https://api.example.org").max_retries.total == 2
    finally:
        session.close()

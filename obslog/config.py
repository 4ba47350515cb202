"""Configuration helpers for the build-log tools.

This module centralizes environment-driven settings so the parser, the fetcher
and the CLI share one set of defaults. A ``.env`` file in the working
directory is honored; variables already set in the environment win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Config:
    """Runtime configuration values loaded from environment variables."""

    obs_api_url: str
    obs_user: str
    obs_password: str
    default_repository: str
    default_arch: str
    request_timeout_sec: int
    request_retries: int
    verify_ssl: bool
    query_max_lines: int
    cli_lines: int
    debug: bool


def load_config() -> Config:
    """Load configuration from environment variables with safe defaults."""

    load_dotenv()
    return Config(
        obs_api_url=os.getenv("OBS_API_URL", "api.opensuse.org"),
        obs_user=os.getenv("OBS_USER", ""),
        obs_password=os.getenv("OBS_PASSWORD", ""),
        default_repository=os.getenv("OBS_DEFAULT_REPOSITORY", "openSUSE_Tumbleweed"),
        default_arch=os.getenv("OBS_DEFAULT_ARCH", "x86_64"),
        request_timeout_sec=int(os.getenv("REQUEST_TIMEOUT_SEC", "60")),
        request_retries=int(os.getenv("REQUEST_RETRIES", "3")),
        verify_ssl=_env_bool("VERIFY_SSL", "true"),
        query_max_lines=int(os.getenv("BUILDLOG_MAX_LINES", "1000")),
        cli_lines=int(os.getenv("BUILDLOG_CLI_LINES", "100")),
        debug=_env_bool("OBSLOG_DEBUG", "false"),
    )

"""Fetch raw build logs from an Open Build Service instance.

Only transport lives here: the text is handed to ``obslog.buildlog.parse_log``
by the caller.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from obslog.config import Config, load_config
from obslog.errors import BuildLogFetchError, ErrorContext

logger = logging.getLogger(__name__)


def _session(config: Config) -> requests.Session:
    """Return a session retrying idempotent GETs on transient statuses."""

    retry_strategy = Retry(
        total=config.request_retries,
        backoff_factor=1,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    if config.obs_user:
        session.auth = (config.obs_user, config.obs_password)
    return session


def build_log_url(api_url: str, project: str, repository: str, arch: str, package: str) -> str:
    """Return the ``_log`` endpoint URL for one build."""

    base = api_url.rstrip("/")
    if "://" not in base:
        base = f"https://{base}"
    parts = [quote(part, safe=":") for part in (project, repository, arch, package)]
    return f"{base}/build/{'/'.join(parts)}/_log"


def fetch_build_log(
    project: str,
    package: str,
    repository: Optional[str] = None,
    arch: Optional[str] = None,
    config: Optional[Config] = None,
) -> str:
    """Download the raw build log of ``package`` in ``project``.

    Raises:
        ValueError: project or package is empty
        BuildLogFetchError: the request failed or returned a non-200 status
    """

    if not project:
        raise ValueError("project name must be specified")
    if not package:
        raise ValueError("package name must be specified")

    config = config or load_config()
    repository = repository or config.default_repository
    arch = arch or config.default_arch
    url = build_log_url(config.obs_api_url, project, repository, arch, package)
    context = ErrorContext(project=project, package=package, url=url)

    logger.info("fetching build log %s", url)
    try:
        with _session(config) as session:
            resp = session.get(url, timeout=config.request_timeout_sec, verify=config.verify_ssl)
    except requests.RequestException as exc:
        raise BuildLogFetchError(f"failed to get build log from {url}: {exc}", context=context) from exc

    if resp.status_code != 200:
        raise BuildLogFetchError(
            f"failed to get build log: status code {resp.status_code}, body: {resp.text}",
            status=resp.status_code,
            body=resp.text,
            context=context,
        )

    text = resp.content.decode("utf-8", errors="replace")
    logger.debug("fetched %d bytes of build log for %s/%s", len(resp.content), project, package)
    return text

from __future__ import annotations

import logging
from typing import Any

import requests

from gitnr import __version__
from gitnr.errors import FetchError

logger = logging.getLogger(__name__)

USER_AGENT = f"gitnr/{__version__}"


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def http_get(
    session: Any,
    url: str,
    timeout: float | None,
    headers: dict[str, str] | None = None,
    failure_message: str = "HTTP request failed",
) -> requests.Response:
    logger.debug("GET %s", url)
    try:
        response = session.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"{failure_message}\n{url}") from exc
    return response

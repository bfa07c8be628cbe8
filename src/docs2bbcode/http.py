"""Fetch document exports over HTTP."""

from __future__ import annotations

import requests

_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:145.0) Gecko/20100101 Firefox/145.0"
_DEFAULT_HEADERS = {
    "User-Agent": _USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}
_DEFAULT_TIMEOUT = 30.0
_SESSION = requests.Session()


def configure_session() -> None:
    global _SESSION
    _SESSION = requests.Session()
    _SESSION.headers.update(_DEFAULT_HEADERS)


def fetch_text(
    url: str,
    *,
    session: requests.Session | None = None,
    timeout: float = _DEFAULT_TIMEOUT,
) -> str:
    """Download an export and return its HTML.

    Exports are served as UTF-8 even when the response omits the charset,
    in which case requests falls back to ISO-8859-1.
    """

    response = (session or _SESSION).get(url, headers=_DEFAULT_HEADERS, timeout=timeout)
    response.raise_for_status()
    if not response.encoding or response.encoding.lower() == "iso-8859-1":
        response.encoding = "utf-8"
    return response.text


configure_session()

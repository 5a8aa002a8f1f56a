"""Download CSV exports over HTTP."""

from __future__ import annotations

from logging import getLogger

import httpx

from gamelink.config import get_import_config

log = getLogger(__name__)


class SourceFetchError(RuntimeError):
    """Raised when a CSV export cannot be downloaded."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Could not download {url}: {reason}")
        self.url = url


def fetch_csv_text(
    url: str,
    *,
    client: httpx.Client | None = None,
    timeout_seconds: float | None = None,
) -> str:
    """Return the body of ``url`` decoded as UTF-8 (a leading BOM is dropped)."""

    timeout = timeout_seconds or get_import_config().http_timeout_seconds
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        log.info("Downloading %s", url)
        response = http.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SourceFetchError(url, f"HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise SourceFetchError(url, str(exc) or type(exc).__name__) from exc
    finally:
        if owns_client:
            http.close()
    return response.content.decode("utf-8-sig", errors="replace")

"""HTTP fetcher shared by the link and content extractors."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator, Optional
from urllib.parse import urlsplit

import httpx

from docs2context.config import settings
from docs2context.scraper.models import RawPage

# ---------------------------------------------------------------------------
# URL / content-type gates
# ---------------------------------------------------------------------------
_ASSET_EXTENSION = re.compile(
    r"\.(?:pdf|zip|tar|gz|tgz|rar|7z|jpg|jpeg|png|gif|webp|bmp|svg|ico"
    r"|css|js|mjs|map|woff|woff2|ttf|otf|eot|mp3|mp4|webm|avi|mov|exe|dmg)$",
    re.IGNORECASE,
)

_HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml", "text/plain")


class FetchError(Exception):
    """A URL could not be fetched as an HTML document."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class NotHtmlError(FetchError):
    """The response declared a content type we do not parse."""


class AssetUrlError(FetchError):
    """The URL points at a binary or static asset and was never requested."""


def is_asset_url(url: str) -> bool:
    """Return ``True`` if the path of *url* ends in a known asset extension."""
    return bool(_ASSET_EXTENSION.search(urlsplit(url).path))


def is_html_content_type(content_type: str) -> bool:
    content_type = content_type.lower()
    return any(kind in content_type for kind in _HTML_CONTENT_TYPES)


def default_headers() -> dict[str, str]:
    return {"User-Agent": settings.user_agent}


@contextmanager
def http_client(timeout: Optional[float] = None) -> Iterator[httpx.Client]:
    """Open an ``httpx.Client`` with the crawler's headers and redirect policy.

    A single client is safe to share across the worker threads of one crawl
    phase.
    """
    with httpx.Client(
        headers=default_headers(),
        timeout=timeout if timeout is not None else settings.request_timeout,
        follow_redirects=True,
    ) as client:
        yield client


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def fetch_html(
    url: str,
    client: Optional[httpx.Client] = None,
    timeout: Optional[float] = None,
) -> RawPage:
    """Fetch *url* and return a :class:`RawPage` holding HTML-like text.

    Raises:
        AssetUrlError: If *url* ends in a known asset extension.
        NotHtmlError: If the response is not ``text/html``-like.
        FetchError: On timeouts, connection errors, and 4xx/5xx statuses.
    """
    if is_asset_url(url):
        raise AssetUrlError(url, "asset extension")

    if client is None:
        with http_client(timeout) as own_client:
            return fetch_html(url, own_client, timeout)

    try:
        if timeout is None:
            response = client.get(url)
        else:
            response = client.get(url, timeout=timeout)
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise FetchError(url, "timeout") from exc
    except httpx.HTTPStatusError as exc:
        raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if not is_html_content_type(content_type):
        raise NotHtmlError(url, f"content type {content_type or '(none)'!r}")

    return RawPage(
        url=url,
        html=response.text,
        status_code=response.status_code,
        content_type=content_type,
    )

"""Link discovery: turns one fetched page into same-host crawl candidates."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urljoin, urlsplit

import httpx
from bs4 import BeautifulSoup

from docs2context.config import settings
from docs2context.scraper.fetcher import FetchError, fetch_html, is_asset_url
from docs2context.scraper.models import Outcome

logger = logging.getLogger(__name__)


def _accept_link(url: str, base_host: str) -> bool:
    """Return ``True`` if resolved *url* is worth crawling on *base_host*.

    Fragment links and query-string variants are dropped: they point at
    content the crawl reaches through the plain path anyway.
    """
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https"):
        return False
    if parts.hostname != base_host:
        return False
    if "#" in url or "?" in url:
        return False
    return not is_asset_url(url)


def parse_links(html: str, page_url: str, base_host: str) -> List[str]:
    """Return the deduplicated crawlable links in *html*, in document order.

    ``href`` values are resolved against *page_url*.
    """
    soup = BeautifulSoup(html, "html.parser")
    seen: set[str] = set()
    links: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href:
            continue
        try:
            resolved = urljoin(page_url, href)
        except ValueError:
            continue
        if resolved in seen or not _accept_link(resolved, base_host):
            continue
        seen.add(resolved)
        links.append(resolved)
    return links


def extract_links(
    url: str,
    base_host: str,
    client: Optional[httpx.Client] = None,
) -> Outcome[List[str]]:
    """Fetch *url* and return the same-host links it contains.

    Never raises for per-URL problems: fetch and parse failures come back
    as a skip :class:`Outcome` whose reason says what went wrong.
    """
    try:
        raw = fetch_html(url, client=client, timeout=settings.discovery_timeout)
    except FetchError as exc:
        logger.debug("[crawl] no links from %s: %s", url, exc.reason)
        return Outcome.skip(url, exc.reason)

    try:
        links = parse_links(raw.html, url, base_host)
    except Exception as exc:  # noqa: BLE001
        logger.warning("[crawl] could not parse %s: %s", url, exc)
        return Outcome.skip(url, f"parse error: {exc}")

    return Outcome.success(url, links)

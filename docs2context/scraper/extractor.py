"""Content extraction: turns one documentation URL into a :class:`Page`."""

from __future__ import annotations

import logging
import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup, Tag
from markdownify import markdownify

from docs2context.config import settings
from docs2context.scraper.fetcher import FetchError, fetch_html
from docs2context.scraper.models import Outcome, Page

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Main-content containers, most specific first.  ``body`` is the last resort.
# ---------------------------------------------------------------------------
CONTENT_SELECTORS = (
    "main",
    "#main-content",
    ".main-content",
    ".documentation",
    ".content",
    "article",
    ".markdown-body",
    "#content",
    ".docs-content",
    ".docs",
    ".document",
    ".doc-content",
    ".readme",
    ".page-content",
    "body",
)

_STRIP_TAGS = ("script", "style", "noscript", "iframe", "svg")

_BLANK_RUNS = re.compile(r"\n{3,}")
_TRAILING_SPACE = re.compile(r"[ \t]+\n")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _extract_title(soup: BeautifulSoup) -> str:
    """Return the stripped ``<title>`` text, or empty string."""
    if soup.title is None:
        return ""
    return soup.title.get_text(strip=True)


def _select_main_content(soup: BeautifulSoup) -> Optional[Tag]:
    """Return the first container in :data:`CONTENT_SELECTORS` with visible text."""
    for selector in CONTENT_SELECTORS:
        container = soup.select_one(selector)
        if container is not None and container.get_text(strip=True):
            logger.debug("[extract] matched selector %r", selector)
            return container
    return None


def _to_markdown(container: Tag) -> str:
    """Convert *container*'s children to normalised markdown."""
    inner_html = container.decode_contents()
    text = markdownify(inner_html, heading_style="ATX", bullets="-")
    text = _TRAILING_SPACE.sub("\n", text)
    return _BLANK_RUNS.sub("\n\n", text).strip()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def page_from_html(
    url: str,
    html: str,
    min_length: Optional[int] = None,
) -> Outcome[Page]:
    """Build a :class:`Page` from already-fetched *html*.

    Script, style, frame and SVG nodes are stripped before the main content
    container is chosen.  Markdown shorter than *min_length* (defaults to
    ``settings.min_content_length``) is treated as noise.
    """
    if min_length is None:
        min_length = settings.min_content_length

    soup = BeautifulSoup(html, "html.parser")
    title = _extract_title(soup) or url

    for tag in soup(list(_STRIP_TAGS)):
        tag.decompose()

    container = _select_main_content(soup)
    if container is None:
        return Outcome.skip(url, "no main content")

    markdown = _to_markdown(container)
    if len(markdown) < min_length:
        return Outcome.skip(url, f"content too short ({len(markdown)} chars)")

    content = f"# {title}\n\nSource: {url}\n\n{markdown}"
    return Outcome.success(url, Page(url=url, title=title, content=content))


def extract_page(url: str, client: Optional[httpx.Client] = None) -> Outcome[Page]:
    """Fetch *url* and extract its main content as a :class:`Page`.

    Never raises for per-URL problems; the returned :class:`Outcome` says
    why a page was skipped.
    """
    try:
        raw = fetch_html(url, client=client, timeout=settings.request_timeout)
    except FetchError as exc:
        logger.debug("[extract] skip %s: %s", url, exc.reason)
        return Outcome.skip(url, exc.reason)

    try:
        return page_from_html(url, raw.html)
    except Exception as exc:  # noqa: BLE001
        logger.warning("[extract] could not convert %s: %s", url, exc)
        return Outcome.skip(url, f"conversion error: {exc}")

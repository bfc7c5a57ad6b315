"""End-to-end documentation scrape.

``scrape_documentation`` orchestrates the full pipeline from a start URL to
a compiled document:

    crawl → classify → extract → (refine) → assemble

No file I/O happens here; the caller decides what to do with the result.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx

from docs2context.assembler import Document, assemble
from docs2context.config import CrawlConfig, settings
from docs2context.crawler.classifier import get_policy
from docs2context.crawler.controller import CrawlController
from docs2context.crawler.state import CrawlState
from docs2context.refiner import refine_page, refinement_available
from docs2context.scraper.extractor import extract_page
from docs2context.scraper.fetcher import http_client
from docs2context.scraper.links import extract_links
from docs2context.scraper.models import Outcome, Page

logger = logging.getLogger(__name__)

NOTHING_SCRAPED = "No documentation content could be scraped."


@dataclass
class ScrapeResult:
    """What one crawl produced.

    ``document`` is ``None`` when no page survived extraction; callers
    should report :data:`NOTHING_SCRAPED` instead of writing output.
    """

    start_url: str
    state: CrawlState
    worklist: List[str]
    document: Optional[Document] = None
    skipped: List[Outcome] = field(default_factory=list)
    refined: int = 0

    @property
    def nothing_scraped(self) -> bool:
        return self.document is None

    @property
    def text(self) -> str:
        return NOTHING_SCRAPED if self.document is None else self.document.text


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def _extract_all(urls: List[str], concurrency: int) -> tuple[List[Page], List[Outcome]]:
    """Extract every URL with at most *concurrency* requests in flight."""
    pages: Dict[str, Page] = {}
    skipped: List[Outcome] = []

    with http_client(settings.request_timeout) as client, ThreadPoolExecutor(
        max_workers=concurrency
    ) as pool:
        future_to_url = {pool.submit(extract_page, url, client): url for url in urls}
        for done, future in enumerate(as_completed(future_to_url), start=1):
            url = future_to_url[future]
            try:
                outcome = future.result()
            except Exception as exc:  # noqa: BLE001
                outcome = Outcome.skip(url, f"{type(exc).__name__}: {exc}")
            if outcome.ok:
                pages[url] = outcome.value
                logger.debug("[extract] %d/%d ✓ %s", done, len(urls), url)
            else:
                skipped.append(outcome)
                logger.warning("[extract] %d/%d ✗ %s: %s", done, len(urls), url, outcome.reason)

    # Worklist order, not completion order.
    return [pages[url] for url in urls if url in pages], skipped


def _refine_all(pages: List[Page], concurrency: int) -> tuple[List[Page], int]:
    """Refine *pages* under *concurrency*; failures keep the original page."""
    refined: List[Page] = list(pages)
    accepted = 0

    with httpx.Client(timeout=settings.refine_timeout) as client, ThreadPoolExecutor(
        max_workers=concurrency
    ) as pool:
        future_to_index = {
            pool.submit(refine_page, page, client=client): i for i, page in enumerate(pages)
        }
        for future in as_completed(future_to_index):
            i = future_to_index[future]
            try:
                outcome = future.result()
            except Exception as exc:  # noqa: BLE001
                logger.warning("[refine] keeping original for %s: %s", pages[i].url, exc)
                continue
            refined[i] = outcome.value if outcome.value is not None else pages[i]
            if outcome.ok:
                accepted += 1

    return refined, accepted


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def scrape_documentation(
    start_url: str,
    config: Optional[CrawlConfig] = None,
) -> ScrapeResult:
    """Crawl *start_url*, extract its documentation pages and compile them.

    Args:
        start_url: Absolute http(s) URL the crawl starts from.  Only pages on
            the same hostname are followed.
        config: Crawl limits; defaults to :meth:`CrawlConfig.from_settings`.

    Returns:
        A :class:`ScrapeResult`.  When zero pages were extracted its
        ``document`` is ``None`` (``nothing_scraped`` is ``True``).

    Raises:
        ValueError: If *start_url* is not an absolute http(s) URL or the
            configured classifier policy is unknown.
    """
    if config is None:
        config = CrawlConfig.from_settings()

    # ------------------------------------------------------------------
    # 1. Discover
    # ------------------------------------------------------------------
    controller = CrawlController(
        start_url,
        config,
        link_extractor=extract_links,
        policy=get_policy(settings.classifier_policy),
    )
    logger.info(
        "[crawl] starting at %s (host=%s, max_depth=%d, concurrency=%d)",
        start_url, controller.host, config.max_depth, config.concurrency,
    )
    with http_client(settings.discovery_timeout) as client:
        state = controller.crawl(client)

    # ------------------------------------------------------------------
    # 2. Classify
    # ------------------------------------------------------------------
    worklist = controller.worklist()
    logger.info(
        "[crawl] visited %d, discovered %d, %d documentation pages to extract",
        len(state.visited), len(state.discovered), len(worklist),
    )

    result = ScrapeResult(start_url=start_url, state=state, worklist=worklist)

    # ------------------------------------------------------------------
    # 3. Extract
    # ------------------------------------------------------------------
    pages, skipped = _extract_all(worklist, config.concurrency)
    result.skipped = skipped
    if not pages:
        logger.error("[extract] no documentation pages could be extracted from %s", start_url)
        return result
    logger.info("[extract] extracted %d of %d pages", len(pages), len(worklist))

    # ------------------------------------------------------------------
    # 4. Refine (optional)
    # ------------------------------------------------------------------
    if config.refine:
        unavailable = refinement_available()
        if unavailable:
            logger.warning("[refine] refinement disabled: %s", unavailable)
        else:
            pages, result.refined = _refine_all(pages, config.refine_concurrency)
            logger.info("[refine] refined %d of %d pages", result.refined, len(pages))

    # ------------------------------------------------------------------
    # 5. Assemble
    # ------------------------------------------------------------------
    result.document = assemble(start_url, pages)
    return result

"""Bounded-depth, bounded-concurrency discovery of a documentation site.

The controller expands the crawl one depth level at a time.  Each level's
frontier is fanned out to a ``ThreadPoolExecutor``; results are merged back
into :class:`CrawlState` by the controller thread only, in frontier order,
after the whole level has resolved.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional
from urllib.parse import urlsplit

import httpx

from docs2context.config import CrawlConfig
from docs2context.crawler.classifier import (
    PERMISSIVE_POLICY,
    ClassifierPolicy,
    is_documentation_page,
)
from docs2context.crawler.state import CrawlState
from docs2context.scraper.links import extract_links
from docs2context.scraper.models import Outcome

logger = logging.getLogger(__name__)

LinkExtractor = Callable[[str, str, Optional[httpx.Client]], Outcome[List[str]]]


def base_host(start_url: str) -> str:
    """Return the hostname of *start_url*, rejecting non-http(s) input."""
    parts = urlsplit(start_url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ValueError(f"start URL must be an absolute http(s) URL, got {start_url!r}")
    return parts.hostname


class CrawlController:
    """Owns the :class:`CrawlState` of one crawl from ``start_url``."""

    def __init__(
        self,
        start_url: str,
        config: CrawlConfig,
        link_extractor: LinkExtractor = extract_links,
        policy: ClassifierPolicy = PERMISSIVE_POLICY,
    ) -> None:
        self.start_url = start_url
        self.host = base_host(start_url)
        self.config = config
        self.policy = policy
        self._extract_links = link_extractor
        self.state = CrawlState.begin(start_url)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def crawl(self, client: Optional[httpx.Client] = None) -> CrawlState:
        """Expand the site breadth-first up to ``config.max_depth`` hops.

        URLs at depth ``max_depth`` are discovered but never expanded, so
        every member of ``discovered`` satisfies ``depth <= max_depth``.
        """
        state = self.state
        with ThreadPoolExecutor(max_workers=self.config.concurrency) as pool:
            for depth in range(self.config.max_depth):
                frontier = state.frontier(depth)
                if not frontier:
                    logger.info("[crawl] frontier empty at depth %d; stopping", depth)
                    break
                if self._page_cap_reached():
                    logger.info(
                        "[crawl] %d documentation pages discovered (cap %d); "
                        "not scheduling depth %d",
                        len(self.worklist()), self.config.max_pages, depth,
                    )
                    break
                self._expand(pool, frontier, depth, client)
                logger.info(
                    "[crawl] depth %d done: %d visited, %d discovered, %d failed",
                    depth, len(state.visited), len(state.discovered), len(state.failed),
                )
        return state

    def _expand(
        self,
        pool: ThreadPoolExecutor,
        frontier: List[str],
        depth: int,
        client: Optional[httpx.Client],
    ) -> None:
        state = self.state
        for url in frontier:
            state.mark_visited(url)

        futures = [
            pool.submit(self._extract_links, url, self.host, client)
            for url in frontier
        ]
        outcomes: List[Outcome[List[str]]] = []
        for url, future in zip(frontier, futures):
            try:
                outcomes.append(future.result())
            except Exception as exc:  # noqa: BLE001
                outcomes.append(Outcome.skip(url, f"{type(exc).__name__}: {exc}"))

        next_depth = depth + 1
        for outcome in outcomes:
            if not outcome.ok:
                logger.warning("[crawl] skipped %s: %s", outcome.url, outcome.reason)
                state.mark_failed(outcome.url, outcome.reason or "")
                continue
            for link in outcome.value or []:
                if urlsplit(link).hostname != self.host:
                    continue
                state.discover(link, next_depth)

    def _page_cap_reached(self) -> bool:
        return len(self.worklist()) >= self.config.max_pages

    # ------------------------------------------------------------------
    # Worklist
    # ------------------------------------------------------------------

    def worklist(self) -> List[str]:
        """Documentation URLs to extract, in discovery order, capped at ``max_pages``.

        URLs whose link expansion failed are left out.
        """
        urls = [
            url for url in self.state.in_discovery_order()
            if url not in self.state.failed and is_documentation_page(url, self.policy)
        ]
        return urls[: self.config.max_pages]

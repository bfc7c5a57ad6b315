"""Crawler package: traversal state, classification & the crawl controller."""

from docs2context.crawler.classifier import is_documentation_page
from docs2context.crawler.controller import CrawlController
from docs2context.crawler.state import CrawlState

__all__ = ["CrawlController", "CrawlState", "is_documentation_page"]

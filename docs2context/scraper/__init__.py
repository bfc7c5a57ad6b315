"""Scraper package: web fetch, link discovery & content extraction."""

from docs2context.scraper.extractor import extract_page, page_from_html
from docs2context.scraper.fetcher import FetchError, fetch_html
from docs2context.scraper.links import extract_links, parse_links
from docs2context.scraper.models import Outcome, Page, RawPage

__all__ = [
    "fetch_html",
    "FetchError",
    "extract_links",
    "parse_links",
    "extract_page",
    "page_from_html",
    "Outcome",
    "Page",
    "RawPage",
]

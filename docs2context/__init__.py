"""docs2context: crawl a documentation site into one ordered markdown document."""

from docs2context.assembler import Document
from docs2context.config import CrawlConfig
from docs2context.pipeline import NOTHING_SCRAPED, ScrapeResult, scrape_documentation
from docs2context.scraper.models import Page

__version__ = "0.1.0"

__all__ = [
    "scrape_documentation",
    "ScrapeResult",
    "CrawlConfig",
    "Document",
    "Page",
    "NOTHING_SCRAPED",
]

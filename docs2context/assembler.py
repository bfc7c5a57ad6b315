"""Ordering, table of contents and compilation of extracted pages."""

from __future__ import annotations

import locale
import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from docs2context.scraper.models import Page

logger = logging.getLogger(__name__)

INTRO_MARKERS: Tuple[str, ...] = (
    "intro",
    "getting-started",
    "overview",
    "index",
    "readme",
    "home",
    "quickstart",
)

SECTION_SEPARATOR = "\n\n---\n\n"

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class Document:
    """The compiled documentation for one crawl."""

    start_url: str
    pages: Tuple[Page, ...]
    toc: str
    text: str

    def __len__(self) -> int:
        return len(self.pages)


def is_introductory(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in INTRO_MARKERS)


def _fold(title: str) -> str:
    """Casefolded *title* with combining accents removed (``Éclair`` → ``eclair``)."""
    decomposed = unicodedata.normalize("NFKD", title)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _sort_key(page: Page) -> tuple:
    return (
        not is_introductory(page.url),
        _fold(page.title),
        locale.strxfrm(page.title.casefold()),
    )


def order_pages(pages: Iterable[Page]) -> List[Page]:
    """Introductory pages first, then by accent- and case-insensitive title.

    Titles that fold to the same text fall back to the active LC_COLLATE order.

    The sort is stable, so pages with equal keys keep their input order.
    """
    return sorted(pages, key=_sort_key)


def anchor_for(title: str) -> str:
    """Return the markdown anchor for a section titled *title*."""
    return _NON_ALNUM_RUN.sub("-", title.lower())


def build_toc(pages: Iterable[Page]) -> str:
    lines = ["## Table of Contents", ""]
    for number, page in enumerate(pages, start=1):
        lines.append(f"{number}. [{page.title}](#{anchor_for(page.title)})")
    return "\n".join(lines)


def assemble(start_url: str, pages: Iterable[Page]) -> Document:
    """Compile *pages* into a single :class:`Document`.

    Raises:
        ValueError: If *pages* is empty; an empty document is never produced.
    """
    ordered = order_pages(pages)
    if not ordered:
        raise ValueError("cannot assemble a document without pages")

    header = f"# Documentation\n\nAutomatically aggregated documentation from {start_url}"
    toc = build_toc(ordered)
    text = SECTION_SEPARATOR.join([header, toc, *(page.content for page in ordered)])

    logger.info(
        "[assemble] compiled %d pages into %d characters", len(ordered), len(text)
    )
    return Document(start_url=start_url, pages=tuple(ordered), toc=toc, text=text)

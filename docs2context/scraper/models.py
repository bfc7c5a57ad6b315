"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch."""

    url: str
    html: str
    status_code: int
    content_type: str = ""


@dataclass(frozen=True)
class Page:
    """One extracted documentation page.

    ``content`` already carries the ``# title`` heading and the
    ``Source:`` attribution line, so the assembler can concatenate pages
    as-is.
    """

    url: str
    title: str
    content: str


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of one unit of per-URL work.

    A success carries a value and no reason.  A skip carries a reason and
    no value.  A fallback (used by refinement) carries both: the unchanged
    input value and the reason the rewrite was rejected.
    """

    url: str
    value: Optional[T] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, url: str, value: T) -> "Outcome[T]":
        return cls(url=url, value=value)

    @classmethod
    def skip(cls, url: str, reason: str) -> "Outcome[T]":
        return cls(url=url, reason=reason)

    @classmethod
    def fallback(cls, url: str, value: T, reason: str) -> "Outcome[T]":
        return cls(url=url, value=value, reason=reason)

"""Traversal state owned by a single crawl."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set


@dataclass
class CrawlState:
    """Discovery bookkeeping for one crawl.

    ``depth`` is insertion-ordered and holds exactly the members of
    ``discovered``; a URL's depth is written once, when it is first seen,
    and never revised.  Only the controller thread mutates this object.
    """

    start_url: str
    discovered: Set[str] = field(default_factory=set)
    visited: Set[str] = field(default_factory=set)
    depth: Dict[str, int] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def begin(cls, start_url: str) -> "CrawlState":
        state = cls(start_url=start_url)
        state.discover(start_url, 0)
        return state

    def discover(self, url: str, depth: int) -> bool:
        """Record *url* at *depth*; return ``False`` if it was already known."""
        if url in self.discovered:
            return False
        self.discovered.add(url)
        self.depth[url] = depth
        return True

    def mark_visited(self, url: str) -> None:
        self.visited.add(url)

    def mark_failed(self, url: str, reason: str) -> None:
        self.failed[url] = reason

    def in_discovery_order(self) -> List[str]:
        return list(self.depth)

    def frontier(self, depth: int) -> List[str]:
        """URLs first discovered at *depth* that have not been expanded yet."""
        return [
            url for url, d in self.depth.items()
            if d == depth and url not in self.visited
        ]

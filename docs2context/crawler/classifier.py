"""Heuristic documentation-page predicate.

The policy is data: a deny-list of path fragments, and for the strict
variant an allow-list of path segments plus accepted file suffixes.  The
permissive policy is the default; crawl depth and the same-host rule are
what actually bound the worklist.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Tuple
from urllib.parse import urlsplit

DENY_PATTERNS: Tuple[str, ...] = (
    "/download/",
    "/releases/",
    "/changelog/",
    "/community/",
    "/forum/",
    "/contact/",
    "/pricing/",
    "/team/",
    "/about/",
    "/support/",
    "/legal/",
    "/terms/",
    "/privacy/",
)

ALLOW_SEGMENTS: Tuple[str, ...] = (
    "doc",
    "docs",
    "documentation",
    "guide",
    "guides",
    "api",
    "reference",
    "tutorial",
    "tutorials",
    "manual",
    "learn",
    "getting-started",
)

ALLOW_SUFFIXES: Tuple[str, ...] = ("", ".html", ".htm", ".md")


@dataclass(frozen=True)
class ClassifierPolicy:
    name: str
    deny: Tuple[str, ...] = DENY_PATTERNS
    allow_segments: Tuple[str, ...] = ()
    allow_suffixes: Tuple[str, ...] = ()

    @property
    def strict(self) -> bool:
        return bool(self.allow_segments or self.allow_suffixes)


PERMISSIVE_POLICY = ClassifierPolicy(name="permissive")
STRICT_POLICY = ClassifierPolicy(
    name="strict",
    allow_segments=ALLOW_SEGMENTS,
    allow_suffixes=ALLOW_SUFFIXES,
)

POLICIES = {p.name: p for p in (PERMISSIVE_POLICY, STRICT_POLICY)}


def get_policy(name: str) -> ClassifierPolicy:
    try:
        return POLICIES[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown classifier policy {name!r}. Use: {' | '.join(POLICIES)}"
        ) from None


def _normalised_path(url: str) -> str:
    path = urlsplit(url).path.lower() or "/"
    return path if path.endswith("/") else path + "/"


def _passes_allow_rules(path: str, policy: ClassifierPolicy) -> bool:
    segments = [s for s in path.split("/") if s]
    if any(seg in policy.allow_segments for seg in segments):
        return True
    last = segments[-1] if segments else ""
    return posixpath.splitext(last)[1] in policy.allow_suffixes


def is_documentation_page(url: str, policy: ClassifierPolicy = PERMISSIVE_POLICY) -> bool:
    """Return ``True`` if *url* should be extracted as documentation.

    Pure function of *url* and *policy*.
    """
    path = _normalised_path(url)
    if any(pattern in path for pattern in policy.deny):
        return False
    if not policy.strict:
        return True
    return _passes_allow_rules(path, policy)

"""Optional LLM clean-up pass over extracted pages.

Refinement providers
--------------------
``openai`` (default)
    Calls the OpenAI-compatible ``/chat/completions`` endpoint at
    ``OPENAI_BASE_URL`` with a bearer token from ``OPENAI_API_KEY``.
    Configure the model via ``OPENAI_CHAT_MODEL``.

``ollama``
    Calls the local Ollama REST API at ``/api/generate``.
    Configure via ``OLLAMA_BASE_URL`` and ``OLLAMA_CHAT_MODEL``.

Set ``LLM_PROVIDER=ollama`` in your ``.env`` to switch providers.

Refinement is advisory: :func:`refine_page` never raises, and any failure
(transport error, timeout, malformed response, suspiciously short rewrite)
returns the original page untouched.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import Optional

import httpx

from docs2context.config import settings
from docs2context.scraper.models import Outcome, Page

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You clean up documentation pages that were converted from HTML to "
    "markdown. Remove navigation menus, cookie banners, footers, 'edit this "
    "page' links and other site chrome. Fix broken markdown structure. Keep "
    "every code block, table and technical detail exactly as written. Keep "
    "the first heading and the 'Source:' line. Reply with the cleaned "
    "markdown only, without commentary."
)


class RefinementError(Exception):
    """The refinement service did not produce a usable rewrite."""


# ---------------------------------------------------------------------------
# Provider implementations
# ---------------------------------------------------------------------------

def _user_prompt(page: Page) -> str:
    return f"Title: {page.title}\nURL: {page.url}\n\n{page.content}"


def _refine_openai(page: Page, timeout: float, client: httpx.Client) -> str:
    """Call the chat completions API and return the generated text."""
    api_key = os.environ.get("OPENAI_API_KEY", "")
    if not api_key:
        raise RefinementError(
            "OPENAI_API_KEY environment variable is not set. "
            "Set it, switch to LLM_PROVIDER=ollama, or disable refinement."
        )

    response = client.post(
        f"{settings.openai_base_url.rstrip('/')}/chat/completions",
        headers={"Authorization": f"Bearer {api_key}"},
        json={
            "model": settings.openai_chat_model,
            "temperature": 0,
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": _user_prompt(page)},
            ],
        },
        timeout=timeout,
    )
    response.raise_for_status()
    return response.json()["choices"][0]["message"]["content"]


def _refine_ollama(page: Page, timeout: float, client: httpx.Client) -> str:
    """Call Ollama ``/api/generate`` and return the generated text."""
    response = client.post(
        f"{settings.ollama_base_url.rstrip('/')}/api/generate",
        json={
            "model": settings.ollama_chat_model,
            "system": _SYSTEM_PROMPT,
            "prompt": _user_prompt(page),
            "stream": False,
        },
        timeout=timeout,
    )
    response.raise_for_status()
    return response.json()["response"]


def refinement_available() -> Optional[str]:
    """Return why refinement cannot run with the current settings, or ``None``."""
    provider = settings.llm_provider
    if provider not in ("openai", "ollama"):
        return f"unknown LLM_PROVIDER {provider!r}"
    if provider == "openai" and not os.environ.get("OPENAI_API_KEY"):
        return "OPENAI_API_KEY is not set"
    return None


def min_acceptable_length(original: str) -> int:
    """Shortest rewrite of *original* that is not treated as degenerate."""
    return max(settings.min_refined_length, int(len(original) * settings.min_refined_ratio))


def rewrite(
    page: Page,
    timeout: Optional[float] = None,
    client: Optional[httpx.Client] = None,
) -> str:
    """Return the refined content for *page*.

    Pass *client* to reuse one connection pool across pages; otherwise a
    client is opened for this call only.

    Raises:
        RefinementError: On missing credentials, malformed responses, or a
            rewrite shorter than :func:`min_acceptable_length`.
        httpx.HTTPError: On transport failures and non-2xx statuses.
    """
    if timeout is None:
        timeout = settings.refine_timeout

    if settings.llm_provider == "ollama":
        call = _refine_ollama
    elif settings.llm_provider == "openai":
        call = _refine_openai
    else:
        raise RefinementError(f"unknown LLM_PROVIDER {settings.llm_provider!r}")

    if client is None:
        with httpx.Client(timeout=timeout) as own_client:
            return rewrite(page, timeout, own_client)

    try:
        text = call(page, timeout, client)
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise RefinementError(f"malformed response: {exc!r}") from exc

    if not isinstance(text, str):
        raise RefinementError("malformed response: generated text is not a string")
    text = text.strip()
    floor = min_acceptable_length(page.content)
    if len(text) < floor:
        raise RefinementError(f"rewrite too short ({len(text)} < {floor} chars)")
    return text


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def refine_page(
    page: Page,
    timeout: Optional[float] = None,
    client: Optional[httpx.Client] = None,
) -> Outcome[Page]:
    """Return *page* with refined content, or *page* itself on any failure.

    The returned :class:`Outcome` always carries a page.  ``ok`` is ``True``
    only when the rewrite was accepted; otherwise ``reason`` explains the
    fallback and ``value is page``.
    """
    try:
        content = rewrite(page, timeout, client)
    except httpx.TimeoutException:
        reason = "timeout"
    except httpx.HTTPStatusError as exc:
        reason = f"HTTP {exc.response.status_code}"
    except httpx.HTTPError as exc:
        reason = f"{type(exc).__name__}: {exc}"
    except RefinementError as exc:
        reason = str(exc)
    else:
        return Outcome.success(page.url, replace(page, content=content))

    logger.warning("[refine] keeping original for %s: %s", page.url, reason)
    return Outcome.fallback(page.url, page, reason)

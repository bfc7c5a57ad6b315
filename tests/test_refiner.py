"""Tests for the optional LLM refinement pass.

``respx`` stands in for both the OpenAI-compatible and the Ollama endpoints;
``monkeypatch`` switches provider settings and the API key per test.
"""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from docs2context.config import settings
from docs2context.refiner import (
    min_acceptable_length,
    refine_page,
    refinement_available,
)
from docs2context.scraper.models import Page

_OPENAI_URL = "https://llm.test/v1/chat/completions"
_OLLAMA_URL = "http://ollama.test:11434/api/generate"

_ORIGINAL = (
    "# Quickstart\n\nSource: https://docs.example.com/quickstart\n\n"
    + "Skip to content. Menu. Install the package with pip and import it. " * 4
)
_REFINED = (
    "# Quickstart\n\nSource: https://docs.example.com/quickstart\n\n"
    + "Install the package with pip, then import it in your project. " * 3
)


@pytest.fixture()
def page() -> Page:
    return Page(url="https://docs.example.com/quickstart", title="Quickstart", content=_ORIGINAL)


@pytest.fixture()
def openai(monkeypatch):
    monkeypatch.setattr(settings, "llm_provider", "openai")
    monkeypatch.setattr(settings, "openai_base_url", "https://llm.test/v1")
    monkeypatch.setattr(settings, "min_refined_length", 100)
    monkeypatch.setattr(settings, "min_refined_ratio", 0.5)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")


@pytest.fixture()
def ollama(monkeypatch):
    monkeypatch.setattr(settings, "llm_provider", "ollama")
    monkeypatch.setattr(settings, "ollama_base_url", "http://ollama.test:11434")
    monkeypatch.setattr(settings, "min_refined_length", 100)
    monkeypatch.setattr(settings, "min_refined_ratio", 0.5)


def _chat_response(text: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": text}}]})


# ---------------------------------------------------------------------------
# OpenAI provider
# ---------------------------------------------------------------------------

class TestOpenAiRefinement:
    def test_accepts_rewrite(self, openai, page: Page) -> None:
        with respx.mock:
            route = respx.post(_OPENAI_URL).mock(return_value=_chat_response(_REFINED))
            outcome = refine_page(page)

        assert outcome.ok
        assert outcome.value.content == _REFINED.strip()
        assert outcome.value.url == page.url
        assert outcome.value.title == page.title
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == settings.openai_chat_model
        assert page.content in body["messages"][1]["content"]

    def test_original_page_untouched(self, openai, page: Page) -> None:
        with respx.mock:
            respx.post(_OPENAI_URL).mock(return_value=_chat_response(_REFINED))
            refine_page(page)

        assert page.content == _ORIGINAL

    def test_timeout_falls_back(self, openai, page: Page) -> None:
        with respx.mock:
            respx.post(_OPENAI_URL).mock(side_effect=httpx.ReadTimeout("slow"))
            outcome = refine_page(page)

        assert not outcome.ok
        assert outcome.reason == "timeout"
        assert outcome.value is page
        assert outcome.value.content == _ORIGINAL

    def test_error_status_falls_back(self, openai, page: Page) -> None:
        with respx.mock:
            respx.post(_OPENAI_URL).mock(return_value=httpx.Response(429, json={}))
            outcome = refine_page(page)

        assert outcome.reason == "HTTP 429"
        assert outcome.value.content == _ORIGINAL

    def test_malformed_response_falls_back(self, openai, page: Page) -> None:
        with respx.mock:
            respx.post(_OPENAI_URL).mock(return_value=httpx.Response(200, json={"oops": 1}))
            outcome = refine_page(page)

        assert "malformed" in outcome.reason
        assert outcome.value.content == _ORIGINAL

    def test_non_json_response_falls_back(self, openai, page: Page) -> None:
        with respx.mock:
            respx.post(_OPENAI_URL).mock(return_value=httpx.Response(200, text="<html>"))
            outcome = refine_page(page)

        assert not outcome.ok
        assert outcome.value.content == _ORIGINAL

    def test_too_short_rewrite_falls_back(self, openai, page: Page) -> None:
        with respx.mock:
            respx.post(_OPENAI_URL).mock(return_value=_chat_response("# Quickstart\n\nok"))
            outcome = refine_page(page)

        assert "too short" in outcome.reason
        assert outcome.value.content == _ORIGINAL

    def test_missing_api_key_falls_back_without_request(self, openai, page, monkeypatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY")
        with respx.mock(assert_all_called=False) as mock:
            route = mock.post(_OPENAI_URL)
            outcome = refine_page(page)

        assert route.called is False
        assert "OPENAI_API_KEY" in outcome.reason
        assert outcome.value is page

    def test_reuses_caller_client(self, openai, page: Page) -> None:
        other = Page(url="https://docs.example.com/install", title="Install", content=_ORIGINAL)
        with respx.mock:
            route = respx.post(_OPENAI_URL).mock(return_value=_chat_response(_REFINED))
            with httpx.Client() as client:
                first = refine_page(page, client=client)
                second = refine_page(other, client=client)
                assert client.is_closed is False

        assert first.ok and second.ok
        assert route.call_count == 2


# ---------------------------------------------------------------------------
# Ollama provider
# ---------------------------------------------------------------------------

class TestOllamaRefinement:
    def test_accepts_rewrite(self, ollama, page: Page) -> None:
        with respx.mock:
            route = respx.post(_OLLAMA_URL).mock(
                return_value=httpx.Response(200, json={"response": _REFINED})
            )
            outcome = refine_page(page)

        assert outcome.ok
        assert outcome.value.content == _REFINED.strip()
        body = json.loads(route.calls.last.request.content)
        assert body["stream"] is False
        assert "Authorization" not in route.calls.last.request.headers

    def test_connect_error_falls_back(self, ollama, page: Page) -> None:
        with respx.mock:
            respx.post(_OLLAMA_URL).mock(side_effect=httpx.ConnectError("refused"))
            outcome = refine_page(page)

        assert "ConnectError" in outcome.reason
        assert outcome.value is page


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestRefinementAvailable:
    def test_openai_without_key(self, openai, monkeypatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY")
        assert "OPENAI_API_KEY" in refinement_available()

    def test_openai_with_key(self, openai) -> None:
        assert refinement_available() is None

    def test_ollama_needs_no_key(self, ollama, monkeypatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert refinement_available() is None

    def test_unknown_provider(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "llm_provider", "mystery")
        assert "mystery" in refinement_available()


class TestMinAcceptableLength:
    def test_absolute_floor(self, openai) -> None:
        assert min_acceptable_length("x" * 50) == 100

    def test_ratio_of_original(self, openai) -> None:
        assert min_acceptable_length("x" * 1000) == 500

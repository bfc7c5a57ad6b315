"""Tests for page ordering, table of contents and document compilation."""

from __future__ import annotations

import pytest

from docs2context.assembler import (
    SECTION_SEPARATOR,
    Document,
    anchor_for,
    assemble,
    build_toc,
    is_introductory,
    order_pages,
)
from docs2context.scraper.models import Page

START = "https://docs.example.com/"


def _page(path: str, title: str) -> Page:
    url = f"https://docs.example.com/{path}"
    return Page(url=url, title=title, content=f"# {title}\n\nSource: {url}\n\nBody of {title}.")


class TestIsIntroductory:
    @pytest.mark.parametrize(
        "path",
        ["intro", "docs/getting-started", "Overview", "index.html", "README", "home", "quickstart/"],
    )
    def test_markers(self, path: str) -> None:
        assert is_introductory(f"https://docs.example.com/{path}") is True

    def test_plain_page(self) -> None:
        assert is_introductory("https://docs.example.com/docs/config") is False


class TestOrderPages:
    def test_intro_pages_first_then_alphabetical(self) -> None:
        pages = [
            _page("docs/routing", "Routing"),
            _page("docs/getting-started/setup", "Setup"),
            _page("docs/api", "API Reference"),
            _page("docs/getting-started/install", "Installation"),
            _page("docs/config", "Configuration"),
        ]
        ordered = [p.title for p in order_pages(pages)]
        assert ordered == ["Installation", "Setup", "API Reference", "Configuration", "Routing"]

    def test_intro_beats_title_order(self) -> None:
        pages = [_page("docs/aaa", "Aardvark"), _page("docs/overview", "Zebra")]
        assert [p.title for p in order_pages(pages)] == ["Zebra", "Aardvark"]

    def test_title_comparison_ignores_case(self) -> None:
        pages = [_page("docs/b", "beta"), _page("docs/a", "Alpha"), _page("docs/c", "Gamma")]
        assert [p.title for p in order_pages(pages)] == ["Alpha", "beta", "Gamma"]

    def test_accented_titles_sort_with_their_base_letter(self) -> None:
        pages = [_page("docs/z", "Zebra"), _page("docs/e", "Éclair"), _page("docs/a", "Apple")]
        assert [p.title for p in order_pages(pages)] == ["Apple", "Éclair", "Zebra"]

    def test_equal_titles_keep_input_order(self) -> None:
        first = _page("docs/one", "Same")
        second = _page("docs/two", "Same")
        assert order_pages([first, second]) == [first, second]
        assert order_pages([second, first]) == [second, first]


class TestAnchorFor:
    def test_lowercases_and_collapses(self) -> None:
        assert anchor_for("Getting Started: The Basics") == "getting-started-the-basics"

    def test_runs_collapse_to_single_hyphen(self) -> None:
        assert anchor_for("A  --  B") == "a-b"


class TestBuildToc:
    def test_numbered_entries(self) -> None:
        toc = build_toc([_page("a", "First Page"), _page("b", "Second")])
        assert toc.splitlines() == [
            "## Table of Contents",
            "",
            "1. [First Page](#first-page)",
            "2. [Second](#second)",
        ]


class TestAssemble:
    def test_document_layout(self) -> None:
        pages = [_page("docs/b", "Beta"), _page("docs/intro", "Welcome")]
        doc = assemble(START, pages)

        assert isinstance(doc, Document)
        assert [p.title for p in doc.pages] == ["Welcome", "Beta"]
        sections = doc.text.split(SECTION_SEPARATOR)
        assert sections[0] == (
            "# Documentation\n\nAutomatically aggregated documentation from " + START
        )
        assert sections[1] == doc.toc
        assert sections[2] == pages[1].content
        assert sections[3] == pages[0].content
        assert len(doc) == 2

    def test_empty_input_rejected(self) -> None:
        with pytest.raises(ValueError):
            assemble(START, [])

    def test_document_is_frozen(self) -> None:
        doc = assemble(START, [_page("docs/a", "A")])
        with pytest.raises(AttributeError):
            doc.text = "changed"  # type: ignore[misc]

"""docs2context CLI: entry-point for scraping documentation sites.

Usage:
    python cli/main.py --help

Commands:
    add   → crawl a documentation site and write one markdown file
    page  → extract a single page and print it
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from docs2context.xxx
# import ...` works when the CLI is invoked as `python cli/main.py` from any
# working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import locale
import logging
import re
from typing import Optional

import typer

from docs2context.config import CrawlConfig, settings
from docs2context.pipeline import NOTHING_SCRAPED, scrape_documentation
from docs2context.scraper.extractor import extract_page

app = typer.Typer(
    name="docs2context",
    help="Scrape and aggregate documentation into a single markdown file.",
    no_args_is_help=True,
)


def configure_logging(verbose: bool = False) -> None:
    """Configure the root logger once for the whole process."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING if not verbose else logging.DEBUG)


def configure_locale() -> None:
    """Adopt the user's LC_COLLATE so page titles collate as they expect."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        logging.getLogger(__name__).warning("[add] keeping default collation: %s", exc)


def output_filename(project: str) -> str:
    """Return the default output file name for *project*."""
    return f"{re.sub(r'[^a-z0-9]', '-', project.lower())}-docs.md"


@app.command("add")
def add(
    project: str = typer.Argument(..., help="Project name; used for the default output file name."),
    url: str = typer.Option(..., "--url", "-u", help="Start URL of the documentation site."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    disable_ai: bool = typer.Option(False, "--disable-ai", help="Disable AI refinement of content."),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-c", min=1, help="Number of concurrent requests."
    ),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=0, help="Maximum link depth."),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", min=1, help="Maximum pages to extract."),
) -> None:
    """Crawl a documentation site and save it as one markdown file."""
    configure_logging(verbose)
    configure_locale()
    target = output or Path(output_filename(project))

    typer.echo(f"[add] Scraping documentation for {project!r} from {url} …")
    try:
        config = CrawlConfig.from_settings(
            concurrency=concurrency,
            max_depth=max_depth,
            max_pages=max_pages,
            refine=False if disable_ai else None,
        )
        result = scrape_documentation(url, config)
    except ValueError as exc:
        typer.echo(f"[add] ❌ {exc}")
        raise typer.Exit(code=2)

    typer.echo(
        f"[add] Visited {len(result.state.visited)} URL(s), "
        f"discovered {len(result.state.discovered)}, "
        f"{len(result.worklist)} documentation page(s) queued."
    )
    if result.nothing_scraped:
        typer.echo(f"[add] ❌ {NOTHING_SCRAPED}")
        raise typer.Exit(code=1)

    target.write_text(result.document.text, encoding="utf-8")
    typer.echo(
        f"[add] ✅ Documentation saved to {target} "
        f"({len(result.document)} pages, {result.refined} refined, "
        f"{len(result.skipped)} skipped)"
    )


@app.command("page")
def page(
    url: str = typer.Option(..., "--url", "-u", help="URL of the page to extract."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
) -> None:
    """Extract a single page and print its markdown to stdout."""
    configure_logging(verbose)

    outcome = extract_page(url)
    if not outcome.ok:
        typer.echo(f"[page] ❌ Skipped {url}: {outcome.reason}")
        raise typer.Exit(code=1)

    typer.echo(outcome.value.content)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()

"""epublifier CLI — build an EPUB from a list of web pages.

Usage:
    python cli/main.py --help

Commands:
    build   → fetch every URL and write one EPUB
    scrape  → fetch, extract and sanitize a single URL (preview)
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from epublifier.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
from typing import List, Optional

import typer

from epublifier.book.models import BookSpec, SanitizedChapter, derive_slug
from epublifier.book.sanitizer import default_sanitizer, make_sanitizer
from epublifier.config import settings
from epublifier.errors import EpublifierError
from epublifier.pipeline import create_book
from epublifier.sources import from_file, from_iterable, throttled

app = typer.Typer(
    name="epublifier",
    help="Turn an ordered list of web pages into one EPUB.",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# build
# ---------------------------------------------------------------------------
@app.command("build")
def build(
    title: str = typer.Option("", help="Book title."),
    author: str = typer.Option("", help="Book author."),
    save_path: str = typer.Option("", "--save-path", "-o", help="Where to write the EPUB."),
    url: Optional[List[str]] = typer.Option(None, "--url", help="Chapter URL (repeatable, in order)."),
    urls_file: Optional[Path] = typer.Option(None, "--urls-file", help="File with one URL per line."),
    cover: Optional[Path] = typer.Option(None, "--cover", help="Cover image."),
    cover_css: Optional[Path] = typer.Option(None, "--cover-css", help="Stylesheet for the cover page."),
    js: bool = typer.Option(False, "--js", help="Render pages in a headless browser."),
    delay: float = typer.Option(0.0, "--delay", help="Seconds to wait between pages."),
    title_heading: bool = typer.Option(False, "--title-heading", help="Prepend an <h1> title to each chapter."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every chapter."),
) -> None:
    """Fetch every URL in order and write them as chapters of one EPUB."""
    _configure_logging(verbose)

    if url and urls_file:
        typer.echo("[build] Use either --url or --urls-file, not both.", err=True)
        raise typer.Exit(code=1)

    source = None
    if urls_file is not None:
        try:
            source = from_file(urls_file)
        except OSError as exc:
            typer.echo(f"[build] Cannot read {urls_file}: {exc}", err=True)
            raise typer.Exit(code=1)
    elif url:
        source = from_iterable(url)
    if source is not None and delay > 0:
        source = throttled(source, delay)

    spec = BookSpec(
        title=title,
        author=author,
        save_path=save_path,
        url_source=source,
        cover_image_path=cover,
        cover_css_path=cover_css,
        sanitizer=make_sanitizer(title_heading=title_heading),
        requires_js=js,
    )

    def _progress(number: int, chapter: SanitizedChapter) -> None:
        typer.echo(f"[build] Chapter {number}: {chapter.title}")

    typer.echo(f"[build] Building {title!r} …")
    try:
        path = create_book(spec, on_chapter=_progress)
    except EpublifierError as exc:
        typer.echo(f"[build] Failed: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"[build] Wrote {path}")


# ---------------------------------------------------------------------------
# scrape
# ---------------------------------------------------------------------------
@app.command("scrape")
def scrape(
    url: str = typer.Option(..., help="URL to scrape."),
    js: bool = typer.Option(False, "--js", help="Render the page in a headless browser."),
) -> None:
    """Fetch one URL and print the chapter it would become."""
    from epublifier.scraper import extract_article, get_fetcher

    typer.echo(f"[scrape] Fetching {url!r} …")
    try:
        raw = get_fetcher(js).fetch(url)
        article = default_sanitizer(extract_article(raw))
    except EpublifierError as exc:
        typer.echo(f"[scrape] Failed: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"[scrape] Title  : {article.title}")
    typer.echo(f"[scrape] Slug   : {derive_slug(article.title)}")
    typer.echo(f"[scrape] Byline : {article.byline or '(none)'}")
    typer.echo("")
    typer.echo(article.content)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()

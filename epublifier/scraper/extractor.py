"""Content extraction: turns a :class:`RawPage` into an :class:`ExtractedArticle`."""

from __future__ import annotations

import logging
from typing import Optional

from bs4 import BeautifulSoup
from readability import Document
from readability.readability import Unparseable
from trafilatura.metadata import extract_metadata

from epublifier.errors import ExtractionError
from epublifier.scraper.models import ExtractedArticle, RawPage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _has_text(html: str) -> bool:
    """Return ``True`` if *html* renders to any visible text at all."""
    if not html:
        return False
    return bool(BeautifulSoup(html, "lxml").get_text(strip=True))


def _metadata(raw: RawPage) -> tuple[str, str, str, str]:
    """Return ``(title, author, sitename, description)`` from page metadata."""
    meta = extract_metadata(raw.html, default_url=raw.url)
    if meta is None:
        return "", "", "", ""
    return (
        (meta.title or "").strip(),
        (meta.author or "").strip(),
        (meta.sitename or "").strip(),
        (meta.description or "").strip(),
    )


def _bs4_fallback(html: str) -> str:
    """Return the HTML of the most likely content container, or ``""``.

    Used when readability cannot score the page.  Non-content elements are
    stripped first, then ``<main>``, ``<article>`` and ``<body>`` are tried in
    that order.
    """
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "nav", "footer", "header"]):
        tag.decompose()
    container = soup.find("main") or soup.find("article") or soup.body
    if container is None:
        return ""
    return str(container)


def _readability(raw: RawPage) -> tuple[Optional[str], str]:
    """Run readability over *raw*; returns ``(summary_html, short_title)``."""
    doc = Document(raw.html, url=raw.url)
    try:
        summary = doc.summary()
    except Unparseable as exc:
        logger.debug("readability could not parse %s: %s", raw.url, exc)
        return None, ""
    return summary, doc.short_title() or ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_article(raw: RawPage) -> ExtractedArticle:
    """Extract the readable article from *raw*.

    ``readability`` isolates the main content (relative links are resolved
    against ``raw.url``); ``trafilatura`` supplies title and byline metadata.
    When readability yields no visible text a BeautifulSoup heuristic is tried
    before giving up.

    Raises:
        ExtractionError: If no primary-content region can be identified.
    """
    if not raw.html or not raw.html.strip():
        raise ExtractionError("page is empty", url=raw.url)

    content, short_title = _readability(raw)
    if not _has_text(content or ""):
        logger.debug("falling back to container heuristic for %s", raw.url)
        content = _bs4_fallback(raw.html)
    if not _has_text(content or ""):
        raise ExtractionError(
            "failed to find readable content on the provided url", url=raw.url
        )

    title, byline, site_name, excerpt = _metadata(raw)
    return ExtractedArticle(
        url=raw.url,
        title=title or short_title or raw.url,
        content=content or "",
        byline=byline,
        site_name=site_name,
        excerpt=excerpt,
    )

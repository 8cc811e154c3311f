"""Data models for the scraper stage of the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional


@dataclass
class RawPage:
    """The raw document retrieved for a single URL."""

    url: str
    html: str
    # ``None`` when the page came from a headless browser rather than HTTP.
    status_code: Optional[int] = None


@dataclass
class ExtractedArticle:
    """Readable content extracted from a :class:`RawPage`.

    ``content`` is an HTML fragment and may still carry boilerplate the
    extractor failed to strip.  ``byline``, ``site_name`` and ``excerpt`` are
    auxiliary metadata; the pipeline passes them along untouched.
    """

    url: str
    title: str
    content: str
    byline: str = ""
    site_name: str = ""
    excerpt: str = ""

    def with_content(self, content: str) -> "ExtractedArticle":
        """Return a copy of this article with *content* swapped in."""
        return replace(self, content=content)

"""Data models for the book side of the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Callable, List, Optional, Union

from epublifier.scraper.models import ExtractedArticle

# Returns the next URL on each call; ``""`` marks the end of the sequence.
UrlSource = Callable[[], str]
Sanitizer = Callable[[ExtractedArticle], ExtractedArticle]

REQUIRED_FIELDS = ("title", "author", "save_path", "url_source")


@dataclass(frozen=True)
class BookSpec:
    """Everything needed to build one book.

    ``title``, ``author``, ``save_path`` and ``url_source`` are required; the
    rest are optional.  ``sanitizer`` defaults to
    :func:`~epublifier.book.sanitizer.default_sanitizer` and ``language`` to
    ``settings.language`` at run time.
    """

    title: str = ""
    author: str = ""
    save_path: Union[str, Path] = ""
    url_source: Optional[UrlSource] = None
    cover_image_path: Optional[Union[str, Path]] = None
    cover_css_path: Optional[Union[str, Path]] = None
    sanitizer: Optional[Sanitizer] = None
    requires_js: bool = False
    language: Optional[str] = None

    def missing_fields(self) -> List[str]:
        """Return every required field that is unset or empty, in a fixed order."""
        missing = []
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
            # Path("") normalises to ".", which names no file.
            elif isinstance(value, PurePath) and str(value) in ("", "."):
                missing.append(name)
        return missing


def derive_slug(title: str) -> str:
    """``"Chapter One: The Beginning"`` -> ``"chapter-one:-the-beginning"``.

    Only spaces are touched; uniqueness is not guaranteed.
    """
    return title.replace(" ", "-").lower()


@dataclass
class SanitizedChapter:
    """One chapter, ready to hand to the assembler."""

    title: str
    content: str
    slug: str

    @classmethod
    def from_article(cls, article: ExtractedArticle) -> "SanitizedChapter":
        return cls(
            title=article.title,
            content=article.content,
            slug=derive_slug(article.title),
        )

"""Book package — sanitizing chapters and assembling the EPUB."""

from epublifier.book.assembler import DEFAULT_COVER_CSS, EpubAssembler
from epublifier.book.models import BookSpec, SanitizedChapter, derive_slug
from epublifier.book.sanitizer import default_sanitizer, make_sanitizer

__all__ = [
    "BookSpec",
    "DEFAULT_COVER_CSS",
    "EpubAssembler",
    "SanitizedChapter",
    "default_sanitizer",
    "derive_slug",
    "make_sanitizer",
]

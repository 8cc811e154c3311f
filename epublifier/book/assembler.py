"""EPUB assembly on top of ``ebooklib``.

:class:`EpubAssembler` accumulates chapters (and optionally a cover) in the
order they are added, then writes the whole book exactly once.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
import uuid
from html import escape
from pathlib import Path
from typing import List, Optional, Set, Tuple, Union

from ebooklib import epub

from epublifier.config import settings
from epublifier.errors import AssemblyError, WriteError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_RESERVED_NAMES = {"cover.xhtml", "nav.xhtml"}

DEFAULT_COVER_CSS = """\
body {
  background-color: #FFFFFF;
  margin-bottom: 0px;
  margin-left: 0px;
  margin-right: 0px;
  margin-top: 0px;
  text-align: center;
}

img {
  max-height: 100%;
  max-width: 100%;
}
"""


class EpubAssembler:
    """Builds one EPUB book.

    Chapter *slugs* are used as internal file names.  Characters that are not
    safe in an EPUB href are replaced by ``_``, and a slug that collides with
    an earlier one gets an ordinal suffix (``intro``, ``intro-2``, …), so
    duplicate titles never overwrite each other.
    """

    def __init__(
        self,
        title: str,
        author: str,
        language: Optional[str] = None,
        identifier: Optional[str] = None,
    ) -> None:
        self.language = language or settings.language
        self._book = epub.EpubBook()
        self._book.set_identifier(identifier or f"urn:uuid:{uuid.uuid4()}")
        self._book.set_title(title)
        self._book.set_language(self.language)
        self._book.add_author(author)
        self._title = title
        self._chapters: List[epub.EpubHtml] = []
        self._file_names: Set[str] = set(_RESERVED_NAMES)
        self._cover_page: Optional[epub.EpubHtml] = None
        self._written = False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def chapters(self) -> List[Tuple[str, str]]:
        """``(title, file_name)`` for every chapter, in book order."""
        return [(c.title, c.file_name) for c in self._chapters]

    @property
    def has_cover(self) -> bool:
        return self._cover_page is not None

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------
    def _unique_file_name(self, slug: str) -> str:
        base = _UNSAFE_CHARS.sub("_", slug) or "chapter"
        candidate = base
        n = 2
        while f"{candidate}.xhtml" in self._file_names:
            candidate = f"{base}-{n}"
            n += 1
        file_name = f"{candidate}.xhtml"
        self._file_names.add(file_name)
        return file_name

    def add_chapter(
        self,
        content: str,
        title: str,
        slug: str,
        css: Optional[str] = None,
    ) -> str:
        """Append a chapter and return the internal file name it was stored under.

        Args:
            content: Chapter body as an HTML fragment.
            title: Title shown in the table of contents.
            slug: Preferred file name (without extension).
            css: Href of a stylesheet previously registered with :meth:`add_css`.
        """
        file_name = self._unique_file_name(slug)
        chapter = epub.EpubHtml(
            uid=f"chapter_{len(self._chapters) + 1}",
            title=title,
            file_name=file_name,
            lang=self.language,
        )
        chapter.set_content(content)
        if css:
            chapter.add_link(href=css, rel="stylesheet", type="text/css")
        self._book.add_item(chapter)
        self._chapters.append(chapter)
        return file_name

    def add_css(self, path: Union[str, Path], name: str) -> str:
        """Register the stylesheet at *path* as ``style/<name>``; returns its href."""
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise AssemblyError(f"failed to read stylesheet {path}: {exc}") from exc
        href = f"style/{name}"
        item = epub.EpubItem(
            uid=f"css_{Path(name).stem}",
            file_name=href,
            media_type="text/css",
            content=data,
        )
        self._book.add_item(item)
        return href

    def set_cover(self, image_path: Union[str, Path], css_path: Union[str, Path]) -> None:
        """Register the cover image (as ``cover<ext>``) and its stylesheet.

        Raises:
            AssemblyError: If either file cannot be read, or a cover is
                already set.
        """
        if self._cover_page is not None:
            raise AssemblyError("cover already set")
        image_path = Path(image_path)
        try:
            image = image_path.read_bytes()
        except OSError as exc:
            raise AssemblyError(f"failed to read cover image {image_path}: {exc}") from exc
        image_name = f"cover{image_path.suffix}"
        css_href = self.add_css(css_path, "cover.css")

        self._book.set_cover(image_name, image, create_page=False)
        page = epub.EpubHtml(
            uid="cover_page",
            title="Cover",
            file_name="cover.xhtml",
            lang=self.language,
        )
        page.set_content(
            f'<div><img src="{image_name}" alt="{escape(self._title)}"/></div>'
        )
        page.add_link(href=css_href, rel="stylesheet", type="text/css")
        self._book.add_item(page)
        self._cover_page = page

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def _finalize(self) -> None:
        self._book.toc = tuple(self._chapters)
        self._book.add_item(epub.EpubNcx())
        self._book.add_item(epub.EpubNav())
        spine: list = ["nav", *self._chapters]
        if self._cover_page is not None:
            spine.insert(0, self._cover_page)
        self._book.spine = spine

    def write(self, path: Union[str, Path]) -> Path:
        """Write the book to *path* exactly once.

        The EPUB is written to a temporary file next to *path* and then moved
        into place, so a failure never leaves a partial artifact and never
        clobbers an existing one.

        Raises:
            WriteError: If serialisation or the final move fails, or the book
                was already written.
        """
        target = Path(path)
        if self._written:
            raise WriteError("book has already been written", path=target)
        self._written = True
        self._finalize()

        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=".epublifier-", suffix=".epub", dir=target.parent
            )
            os.close(fd)
            epub.write_epub(tmp_name, self._book, {})
            os.replace(tmp_name, target)
        except Exception as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise WriteError(f"failed to write book: {exc}", path=target) from exc

        logger.info("wrote %d chapter(s) to %s", len(self._chapters), target)
        return target

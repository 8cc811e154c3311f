"""Book pipeline — the orchestrator.

``create_book`` turns a :class:`~epublifier.book.models.BookSpec` into an
EPUB on disk:

    validate → cover → for each URL: fetch → extract → sanitize → add chapter
             → write

Any failure aborts the whole run with a stage-specific
:class:`~epublifier.errors.EpublifierError`; the book is only written once
every chapter has been added.
"""

from __future__ import annotations

import enum
import logging
import tempfile
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Type

from epublifier.book.assembler import DEFAULT_COVER_CSS, EpubAssembler
from epublifier.book.models import BookSpec, Sanitizer, SanitizedChapter
from epublifier.book.sanitizer import default_sanitizer
from epublifier.config import settings
from epublifier.errors import (
    AssemblyError,
    EpublifierError,
    ExtractionError,
    FetchError,
    SanitizationError,
    ValidationError,
)
from epublifier.scraper.extractor import extract_article
from epublifier.scraper.fetcher import Fetcher, get_fetcher
from epublifier.scraper.models import ExtractedArticle, RawPage
from epublifier.sources import iter_urls

logger = logging.getLogger(__name__)

Extractor = Callable[[RawPage], ExtractedArticle]
AssemblerFactory = Callable[[str, str, str], EpubAssembler]
# Called as ``on_chapter(number, chapter)`` after each chapter is added.
ChapterCallback = Callable[[int, SanitizedChapter], None]


class PipelineState(enum.Enum):
    VALIDATING = "validating"
    SETTING_COVER = "setting_cover"
    ITERATING = "iterating"
    WRITING = "writing"
    FAILED = "failed"
    DONE = "done"


TERMINAL_STATES = frozenset({PipelineState.FAILED, PipelineState.DONE})


@contextmanager
def _stage(error_cls: Type[EpublifierError], url: Optional[str]) -> Iterator[None]:
    """Re-raise anything other than *error_cls* as *error_cls*, tagged with *url*."""
    try:
        yield
    except error_cls as exc:
        if exc.url is None:
            exc.url = url
        raise
    except Exception as exc:
        raise error_cls(f"{type(exc).__name__}: {exc}", url=url) from exc


class BookPipeline:
    """One run of the pipeline for one :class:`BookSpec`.

    Args:
        spec: What to build.
        fetcher: Overrides the fetcher otherwise chosen from
            ``spec.requires_js``.
        extractor: Turns a :class:`RawPage` into an :class:`ExtractedArticle`.
        assembler_factory: Called as ``factory(title, author, language)``.
        on_chapter: Progress hook, called with the 1-based chapter number and
            the chapter once it is in the book.
    """

    def __init__(
        self,
        spec: BookSpec,
        fetcher: Optional[Fetcher] = None,
        extractor: Extractor = extract_article,
        assembler_factory: AssemblerFactory = EpubAssembler,
        on_chapter: Optional[ChapterCallback] = None,
    ) -> None:
        self.spec = spec
        self.state = PipelineState.VALIDATING
        self.chapters_added = 0
        self._fetcher = fetcher
        self._extractor = extractor
        self._assembler_factory = assembler_factory
        self._on_chapter = on_chapter
        self._started = False

    def _transition(self, state: PipelineState) -> None:
        logger.debug("pipeline %s -> %s", self.state.value, state.value)
        self.state = state

    # ------------------------------------------------------------------
    # Entry-point
    # ------------------------------------------------------------------
    def run(self) -> Path:
        """Build and write the book; returns the path it was written to.

        Raises:
            ValidationError: Required fields are missing (nothing else runs).
            FetchError, ExtractionError, SanitizationError, AssemblyError:
                A chapter or the cover failed; no book is written.
            WriteError: The finished book could not be written.
        """
        if self._started:
            raise RuntimeError("a BookPipeline can only be run once")
        self._started = True

        # Temporary files registered on ``cleanup`` are removed on every exit.
        with ExitStack() as cleanup:
            try:
                path = self._run(cleanup)
            except BaseException:
                self._transition(PipelineState.FAILED)
                raise
            self._transition(PipelineState.DONE)
            return path

    def _run(self, cleanup: ExitStack) -> Path:
        spec = self.spec

        # ------------------------------------------------------------------
        # 1 — Validate, before any I/O
        # ------------------------------------------------------------------
        missing = spec.missing_fields()
        if missing:
            raise ValidationError(missing)

        # ------------------------------------------------------------------
        # 2 & 3 — Empty book, then the optional cover
        # ------------------------------------------------------------------
        assembler = self._assembler_factory(
            spec.title, spec.author, spec.language or settings.language
        )
        self._transition(PipelineState.SETTING_COVER)
        if spec.cover_image_path:
            self._set_cover(assembler, cleanup)

        # ------------------------------------------------------------------
        # 4 — One chapter per URL, strictly in order
        # ------------------------------------------------------------------
        self._transition(PipelineState.ITERATING)
        fetcher = self._fetcher or get_fetcher(spec.requires_js)
        sanitizer = spec.sanitizer or default_sanitizer
        for url in iter_urls(spec.url_source):
            self._add_chapter(url, fetcher, sanitizer, assembler)

        # ------------------------------------------------------------------
        # 5 — Write once
        # ------------------------------------------------------------------
        self._transition(PipelineState.WRITING)
        return assembler.write(spec.save_path)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def _set_cover(self, assembler: EpubAssembler, cleanup: ExitStack) -> None:
        css_path = self.spec.cover_css_path
        if not css_path:
            css_path = self._default_css_file(cleanup)
        with _stage(AssemblyError, None):
            assembler.set_cover(self.spec.cover_image_path, css_path)

    @staticmethod
    def _default_css_file(cleanup: ExitStack) -> str:
        """Write the built-in cover CSS to a temp file owned by *cleanup*."""
        try:
            with tempfile.NamedTemporaryFile(
                "w", suffix=".css", delete=False, encoding="utf-8"
            ) as fh:
                cleanup.callback(Path(fh.name).unlink, missing_ok=True)
                fh.write(DEFAULT_COVER_CSS)
        except OSError as exc:
            raise AssemblyError(f"failed to write temporary cover css: {exc}") from exc
        return fh.name

    def _add_chapter(
        self,
        url: str,
        fetcher: Fetcher,
        sanitizer: Sanitizer,
        assembler: EpubAssembler,
    ) -> None:
        with _stage(FetchError, url):
            raw = fetcher.fetch(url)
        with _stage(ExtractionError, url):
            article = self._extractor(raw)
        with _stage(SanitizationError, url):
            article = sanitizer(article)
            if not isinstance(article, ExtractedArticle):
                raise SanitizationError(
                    f"sanitizer returned {type(article).__name__}, expected ExtractedArticle"
                )

        chapter = SanitizedChapter.from_article(article)
        with _stage(AssemblyError, url):
            assembler.add_chapter(chapter.content, chapter.title, chapter.slug)
        self.chapters_added += 1
        logger.info("added chapter %d: %s (%s)", self.chapters_added, chapter.title, url)
        if self._on_chapter is not None:
            self._on_chapter(self.chapters_added, chapter)


def create_book(spec: BookSpec, **kwargs) -> Path:
    """Run a fresh :class:`BookPipeline` for *spec*; see :meth:`BookPipeline.run`."""
    return BookPipeline(spec, **kwargs).run()

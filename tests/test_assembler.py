"""Tests for EPUB assembly.

Books are written to ``tmp_path`` and inspected as plain zip archives; the
spine order is read straight out of ``content.opf``.
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from epublifier.book.assembler import DEFAULT_COVER_CSS, EpubAssembler
from epublifier.errors import AssemblyError, WriteError

_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _names(path: Path) -> list[str]:
    with zipfile.ZipFile(path) as zf:
        return zf.namelist()


def _read(path: Path, name: str) -> str:
    with zipfile.ZipFile(path) as zf:
        return zf.read(name).decode("utf-8")


@pytest.fixture()
def assembler() -> EpubAssembler:
    return EpubAssembler("My Book", "Jane Doe", language="en", identifier="urn:uuid:test")


# ---------------------------------------------------------------------------
# Chapters
# ---------------------------------------------------------------------------

class TestChapters:
    def test_chapters_written_in_call_order(self, assembler: EpubAssembler, tmp_path: Path) -> None:
        assembler.add_chapter("<body><p>First</p></body>", "Part One", "part-one")
        assembler.add_chapter("<body><p>Second</p></body>", "Part Two", "part-two")
        out = assembler.write(tmp_path / "book.epub")

        names = _names(out)
        assert "EPUB/part-one.xhtml" in names
        assert "EPUB/part-two.xhtml" in names

        opf = _read(out, "EPUB/content.opf")
        assert opf.index('idref="chapter_1"') < opf.index('idref="chapter_2"')
        assert "My Book" in opf
        assert "Jane Doe" in opf
        assert "First" in _read(out, "EPUB/part-one.xhtml")

    def test_duplicate_slugs_get_ordinal_suffix(self, assembler: EpubAssembler) -> None:
        first = assembler.add_chapter("<p>a</p>", "Intro", "intro")
        second = assembler.add_chapter("<p>b</p>", "Intro", "intro")
        third = assembler.add_chapter("<p>c</p>", "Intro", "intro")

        assert (first, second, third) == ("intro.xhtml", "intro-2.xhtml", "intro-3.xhtml")
        assert [title for title, _ in assembler.chapters] == ["Intro", "Intro", "Intro"]

    def test_unsafe_characters_replaced_in_file_name(self, assembler: EpubAssembler) -> None:
        name = assembler.add_chapter("<p>a</p>", "Chapter One: The Beginning",
                                     "chapter-one:-the-beginning")
        assert name == "chapter-one_-the-beginning.xhtml"

    def test_reserved_and_empty_slugs(self, assembler: EpubAssembler) -> None:
        assert assembler.add_chapter("<p>a</p>", "", "") == "chapter.xhtml"
        assert assembler.add_chapter("<p>b</p>", "Cover", "cover") == "cover-2.xhtml"

    def test_chapter_stylesheet_link(self, assembler: EpubAssembler, tmp_path: Path) -> None:
        css = tmp_path / "chapter.css"
        css.write_text("p { margin: 0; }")
        href = assembler.add_css(css, "chapter.css")
        assembler.add_chapter("<body><p>Styled</p></body>", "Styled", "styled", css=href)
        out = assembler.write(tmp_path / "book.epub")

        assert href == "style/chapter.css"
        assert "EPUB/style/chapter.css" in _names(out)
        assert 'href="style/chapter.css"' in _read(out, "EPUB/styled.xhtml")

    def test_empty_book_is_writable(self, assembler: EpubAssembler, tmp_path: Path) -> None:
        out = assembler.write(tmp_path / "empty.epub")
        assert "EPUB/content.opf" in _names(out)


# ---------------------------------------------------------------------------
# Cover
# ---------------------------------------------------------------------------

class TestCover:
    def test_cover_registered_under_fixed_name(self, assembler: EpubAssembler, tmp_path: Path) -> None:
        image = tmp_path / "nephis.png"
        image.write_bytes(_PNG)
        css = tmp_path / "c.css"
        css.write_text(DEFAULT_COVER_CSS)

        assembler.set_cover(image, css)
        assembler.add_chapter("<body><p>x</p></body>", "One", "one")
        out = assembler.write(tmp_path / "book.epub")

        names = _names(out)
        assert "EPUB/cover.png" in names
        assert "EPUB/style/cover.css" in names
        assert "EPUB/cover.xhtml" in names
        assert assembler.has_cover

        opf = _read(out, "EPUB/content.opf")
        assert opf.index('idref="cover_page"') < opf.index('idref="chapter_1"')

    def test_missing_image_raises(self, assembler: EpubAssembler, tmp_path: Path) -> None:
        css = tmp_path / "c.css"
        css.write_text(DEFAULT_COVER_CSS)
        with pytest.raises(AssemblyError):
            assembler.set_cover(tmp_path / "missing.jpg", css)
        assert not assembler.has_cover

    def test_missing_stylesheet_raises(self, assembler: EpubAssembler, tmp_path: Path) -> None:
        image = tmp_path / "cover.jpg"
        image.write_bytes(b"\xff\xd8\xff")
        with pytest.raises(AssemblyError):
            assembler.set_cover(image, tmp_path / "missing.css")

    def test_cover_only_once(self, assembler: EpubAssembler, tmp_path: Path) -> None:
        image = tmp_path / "cover.png"
        image.write_bytes(_PNG)
        css = tmp_path / "c.css"
        css.write_text(DEFAULT_COVER_CSS)
        assembler.set_cover(image, css)
        with pytest.raises(AssemblyError):
            assembler.set_cover(image, css)


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

class TestWrite:
    def test_write_only_once(self, assembler: EpubAssembler, tmp_path: Path) -> None:
        assembler.write(tmp_path / "book.epub")
        with pytest.raises(WriteError):
            assembler.write(tmp_path / "again.epub")
        assert not (tmp_path / "again.epub").exists()

    def test_missing_directory_raises(self, assembler: EpubAssembler, tmp_path: Path) -> None:
        with pytest.raises(WriteError) as info:
            assembler.write(tmp_path / "no" / "such" / "dir" / "book.epub")
        assert info.value.path == tmp_path / "no" / "such" / "dir" / "book.epub"

    def test_failed_write_keeps_existing_artifact(
        self, assembler: EpubAssembler, tmp_path: Path
    ) -> None:
        target = tmp_path / "book.epub"
        target.write_bytes(b"previous run")
        assembler.add_chapter("<p>x</p>", "One", "one")

        with patch("epublifier.book.assembler.epub.write_epub", side_effect=OSError("disk full")):
            with pytest.raises(WriteError):
                assembler.write(target)

        assert target.read_bytes() == b"previous run"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["book.epub"]

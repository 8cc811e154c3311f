"""Tests for URL source helpers."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from epublifier.sources import from_file, from_iterable, iter_urls, throttled


class TestFromIterable:
    def test_yields_in_order_then_sentinel(self) -> None:
        source = from_iterable(["https://a", "https://b"])
        assert [source(), source(), source(), source()] == ["https://a", "https://b", "", ""]

    def test_blank_entries_skipped(self) -> None:
        source = from_iterable(["", "  https://a  ", "   ", "https://b"])
        assert list(iter_urls(source)) == ["https://a", "https://b"]

    def test_lazy(self) -> None:
        pulled = []

        def gen():
            for u in ["https://a", "https://b"]:
                pulled.append(u)
                yield u

        source = from_iterable(gen())
        assert pulled == []
        source()
        assert pulled == ["https://a"]


class TestFromFile:
    def test_comments_and_blank_lines_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "urls.txt"
        path.write_text("# chapters\nhttps://a\n\n  # skipped\nhttps://b\n", encoding="utf-8")
        assert list(iter_urls(from_file(path))) == ["https://a", "https://b"]


class TestThrottled:
    def test_sleeps_between_pulls_only(self) -> None:
        source = throttled(from_iterable(["https://a", "https://b"]), 2.5)
        with patch("epublifier.sources.time.sleep") as mock_sleep:
            assert list(iter_urls(source)) == ["https://a", "https://b"]
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(2.5)

    def test_zero_delay_never_sleeps(self) -> None:
        source = throttled(from_iterable(["https://a", "https://b"]), 0)
        with patch("epublifier.sources.time.sleep") as mock_sleep:
            list(iter_urls(source))
        mock_sleep.assert_not_called()


class TestIterUrls:
    def test_stops_at_sentinel_and_does_not_pull_again(self) -> None:
        calls = []
        values = iter(["https://a", "", "https://never"])

        def source() -> str:
            value = next(values)
            calls.append(value)
            return value

        assert list(iter_urls(source)) == ["https://a"]
        assert calls == ["https://a", ""]

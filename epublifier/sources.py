"""Helpers for building URL sources.

A URL source is a zero-argument callable that returns the next URL on each
call and ``""`` once the sequence is exhausted.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Iterable, Iterator, Union

from epublifier.book.models import UrlSource


def from_iterable(urls: Iterable[str]) -> UrlSource:
    """Wrap *urls* as a URL source.  Empty strings are skipped, not treated as the end."""
    iterator = (u.strip() for u in urls if u and u.strip())

    def _next() -> str:
        return next(iterator, "")

    return _next


def from_file(path: Union[str, Path]) -> UrlSource:
    """Read one URL per line from *path*; blank lines and ``#`` comments are skipped."""
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return from_iterable(line for line in lines if not line.lstrip().startswith("#"))


def throttled(source: UrlSource, delay: float) -> UrlSource:
    """Sleep *delay* seconds before every pull after the first, sentinel included."""
    pulls = 0

    def _next() -> str:
        nonlocal pulls
        if pulls and delay > 0:
            time.sleep(delay)
        pulls += 1
        return source()

    return _next


def iter_urls(source: UrlSource) -> Iterator[str]:
    """Yield URLs from *source* until it returns the ``""`` sentinel."""
    url = source()
    while url:
        yield url
        url = source()

"""Chapter sanitizers.

A sanitizer takes the :class:`~epublifier.scraper.models.ExtractedArticle`
produced by the extractor and returns a cleaned copy.  The default one keeps
only the ``<body>`` subtree of the content, after dropping the hint blocks
some reader-mode extensions inject around a ``<dialog>`` element.

Content is parsed with the ``html5lib`` tree builder, which follows the HTML5
parsing algorithm: ``html``/``head``/``body`` are always synthesised and
stray markup after ``</html>`` is moved into the body rather than dropped.

Both tree walks use an explicit stack rather than recursion so deeply nested
documents cannot exhaust the interpreter's recursion limit.
"""

from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from epublifier.book.models import Sanitizer
from epublifier.errors import SanitizationError
from epublifier.scraper.models import ExtractedArticle

CONTENT_CONTAINER = "body"
ARTIFACT_TAG = "dialog"


# ---------------------------------------------------------------------------
# Tree walks
# ---------------------------------------------------------------------------

def _find_first(root: Tag, name: str) -> Optional[Tag]:
    """Depth-first, document-order search for the first element called *name*."""
    stack: List[Tag] = [root]
    while stack:
        node = stack.pop()
        if node is not root and node.name == name:
            return node
        children = [child for child in node.contents if isinstance(child, Tag)]
        stack.extend(reversed(children))
    return None


def _remove_artifacts(root: Tag) -> int:
    """Remove every ``<dialog>`` element and the node right after it.

    A dialog that was itself the trailing node of an earlier dialog goes with
    it and does not take another sibling along.  Returns the number of
    dialogs removed.
    """
    found: List[Tag] = []
    stack: List[Tag] = [root]
    while stack:
        node = stack.pop()
        if node is not root and node.name == ARTIFACT_TAG:
            found.append(node)
            continue
        children = [child for child in node.contents if isinstance(child, Tag)]
        stack.extend(reversed(children))

    # ``found`` is in document order, so a dialog that trails another one is
    # already detached by the time the loop reaches it.
    removed = 0
    for dialog in found:
        if dialog.parent is None:
            continue
        trailing = dialog.next_sibling
        dialog.extract()
        removed += 1
        if trailing is not None:
            trailing.extract()
    return removed


def _parse(article: ExtractedArticle) -> BeautifulSoup:
    try:
        return BeautifulSoup(article.content, "html5lib")
    except ParserRejectedMarkup as exc:
        raise SanitizationError(f"failed to parse html: {exc}", url=article.url) from exc


def _body_only(article: ExtractedArticle, soup: BeautifulSoup) -> Tag:
    _remove_artifacts(soup)
    body = _find_first(soup, CONTENT_CONTAINER)
    if body is None:
        raise SanitizationError("content has no <body> element", url=article.url)
    return body


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def default_sanitizer(article: ExtractedArticle) -> ExtractedArticle:
    """Keep only the ``<body>`` subtree of *article*'s content.

    Idempotent: feeding the output back in returns identical content.
    """
    soup = _parse(article)
    body = _body_only(article, soup)
    return article.with_content(str(body))


def make_sanitizer(title_heading: bool = False) -> Sanitizer:
    """Build a variant of :func:`default_sanitizer`.

    Args:
        title_heading: Insert an ``<h1>`` holding the article title as the
            first child of the body (skipped if one is already there).
    """
    if not title_heading:
        return default_sanitizer

    def _sanitize(article: ExtractedArticle) -> ExtractedArticle:
        soup = _parse(article)
        body = _body_only(article, soup)
        first = body.find(True, recursive=False)
        if not (first is not None and first.name == "h1" and first.get_text() == article.title):
            heading = soup.new_tag("h1")
            heading.string = article.title
            body.insert(0, heading)
        return article.with_content(str(body))

    return _sanitize

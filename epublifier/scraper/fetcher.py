"""Page fetchers: plain HTTP, or a headless browser for JS-rendered pages.

The strategy is chosen once per run from ``BookSpec.requires_js``; there is
no automatic fallback from one to the other.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from epublifier.config import settings
from epublifier.errors import FetchError
from epublifier.scraper.models import RawPage

logger = logging.getLogger(__name__)


def _default_headers() -> dict[str, str]:
    return {
        "Accept": "text/html",
        "User-Agent": settings.user_agent,
    }


class Fetcher(Protocol):
    """Anything that can turn a URL into a :class:`RawPage`."""

    def fetch(self, url: str) -> RawPage:
        ...


# ---------------------------------------------------------------------------
# Plain HTTP
# ---------------------------------------------------------------------------

class DirectFetcher:
    """Fetch pages with a single ``httpx`` GET request.

    4xx/5xx responses are rejected here with :class:`FetchError` instead of
    being passed on to the extractor as if they were articles.
    """

    def fetch(self, url: str) -> RawPage:
        logger.debug("GET %s", url)
        try:
            with httpx.Client(
                headers=_default_headers(),
                timeout=settings.request_timeout,
                follow_redirects=True,
            ) as client:
                response = client.get(url)
                response.raise_for_status()
                html = response.text
                status_code = response.status_code
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"server returned HTTP {exc.response.status_code}", url=url
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"failed to make request: {exc}", url=url) from exc

        return RawPage(url=url, html=html, status_code=status_code)


# ---------------------------------------------------------------------------
# Headless browser
# ---------------------------------------------------------------------------

def render_page(url: str) -> str:
    """Render *url* in a fresh headless Chromium and return its outer HTML.

    A new browser and an isolated context are created for every call and torn
    down before returning, so no cookies or storage carry over between pages.

    Playwright is imported lazily so the HTTP-only path does not need a
    browser installed.
    """
    from playwright.sync_api import Error as PlaywrightError  # noqa: PLC0415
    from playwright.sync_api import sync_playwright  # noqa: PLC0415

    try:
        with sync_playwright() as pw:
            browser = pw.chromium.launch(headless=True)
            try:
                context = browser.new_context(user_agent=settings.user_agent)
                try:
                    page = context.new_page()
                    page.goto(
                        url,
                        timeout=int(settings.render_timeout * 1000),
                        wait_until="load",
                    )
                    return page.content()
                finally:
                    context.close()
            finally:
                browser.close()
    except PlaywrightError as exc:
        raise FetchError(f"failed to render page: {exc}", url=url) from exc


class RenderedFetcher:
    """Fetch pages through :func:`render_page`, one browser per URL."""

    def fetch(self, url: str) -> RawPage:
        logger.debug("render %s", url)
        html = render_page(url)
        return RawPage(url=url, html=html, status_code=None)


def get_fetcher(requires_js: bool) -> Fetcher:
    """Return the fetcher matching the ``requires_js`` flag."""
    if requires_js:
        return RenderedFetcher()
    return DirectFetcher()

"""Scraper package — page fetch & readable-content extraction."""

from epublifier.scraper.extractor import extract_article
from epublifier.scraper.fetcher import DirectFetcher, Fetcher, RenderedFetcher, get_fetcher
from epublifier.scraper.models import ExtractedArticle, RawPage

__all__ = [
    "DirectFetcher",
    "ExtractedArticle",
    "Fetcher",
    "RawPage",
    "RenderedFetcher",
    "extract_article",
    "get_fetcher",
]

"""
serpharvest - browser-driven search results extraction.

Drives a search engine results page through Playwright, extracts six
result categories (organic, featured snippets, people-also-ask, related
searches, videos, images) with per-category degradation, optionally
follows up on organic results, and exports JSON, text, CSV and HTML.
"""

from serpharvest.crawler.crawler import Crawler, CrawlResult
from serpharvest.scraper import SearchResultScraper, extract_from_html
from serpharvest.search.schemas import (
    DEFAULT_CONFIG,
    DEFAULT_OUTPUT_FORMATS,
    DEFAULT_SEARCH_QUERY,
    ExtractOptions,
    OutputFormat,
    ScraperConfig,
    SearchResults,
)

__version__ = "0.1.0"

__all__ = [
    "Crawler",
    "CrawlResult",
    "SearchResultScraper",
    "extract_from_html",
    "ScraperConfig",
    "ExtractOptions",
    "OutputFormat",
    "SearchResults",
    "DEFAULT_CONFIG",
    "DEFAULT_OUTPUT_FORMATS",
    "DEFAULT_SEARCH_QUERY",
]

"""
Data models for search results and scraper configuration.

Design Philosophy:
- Result records are pydantic models serialized with camelCase aliases
  (organicResults, followUpSearched, ...); either alias or field name is
  accepted on input
- Region fields on SearchResults are None when the category was not
  requested and [] when it was requested but nothing matched
- Every text truncation goes through truncate_text()
- OrganicResult.follow_up_searched changes only through record_follow_up()
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from serpharvest.errors import FollowUpAlreadyRecordedError

TRUNCATE_LIMIT = 100
FOLLOW_UP_EXCERPT_LIMIT = 1000
ELLIPSIS = "…"

# Region keys in extraction and rendering order
REGION_KEYS: tuple[str, ...] = (
    "organic_results",
    "featured_snippets",
    "people_also_ask",
    "related_searches",
    "videos",
    "images",
)


def truncate_text(
    text: str | None,
    limit: int = TRUNCATE_LIMIT,
    marker: str = ELLIPSIS,
) -> str | None:
    """Cut text to its first ``limit`` characters plus ``marker``.

    Text of ``limit`` characters or fewer is returned unchanged. Truncating
    an already truncated value is a no-op since the result keeps the same
    prefix.

    Args:
        text: Text to truncate. None passes through.
        limit: Maximum number of characters kept.
        marker: Appended when the text was cut.

    Returns:
        Truncated text or None.
    """
    if text is None:
        return None
    if len(text) <= limit:
        return text
    return text[:limit] + marker


def utc_timestamp() -> str:
    """Current time as ISO-8601 UTC with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Result records
# =============================================================================


class DeepLink(_CamelModel):
    """Sitelink listed under an organic result."""

    text: str | None = None
    url: str | None = None


class FollowUpResult(_CamelModel):
    """Content captured by visiting an organic result's target page."""

    title: str | None = None
    excerpt: str | None = None
    url: str


class OrganicResult(_CamelModel):
    """One organic search result."""

    position: int = Field(..., ge=1)
    title: str | None = None
    url: str | None = None
    snippet: str | None = None
    deep_links: list[DeepLink] = Field(default_factory=list)
    follow_up_searched: bool = False
    follow_up_result: FollowUpResult | None = None

    def record_follow_up(self, result: FollowUpResult) -> None:
        """Mark this entry as followed up and store the captured page.

        Raises:
            FollowUpAlreadyRecordedError: If a follow-up was already recorded.
        """
        if self.follow_up_searched:
            raise FollowUpAlreadyRecordedError(self.position)
        self.follow_up_result = result
        self.follow_up_searched = True


class FeaturedSnippet(_CamelModel):
    """Answer box shown above organic results."""

    content: str | None = None
    source: str | None = None
    url: str | None = None

    @field_validator("content")
    @classmethod
    def truncate_content(cls, v: str | None) -> str | None:
        return truncate_text(v)


class VideoResult(_CamelModel):
    """Video carousel tile."""

    title: str | None = None
    source: str | None = None
    duration: str | None = None
    url: str | None = None


class ImageResult(_CamelModel):
    """Image grid tile. ``src``/``alt`` are raw attributes of the <img>."""

    src: str | None = None
    alt: str | None = None
    title: str | None = None
    url: str | None = None
    dimensions: str | None = None


class SearchResults(_CamelModel):
    """Aggregate of every requested region for one query run."""

    query: str
    timestamp: str = Field(default_factory=utc_timestamp)
    organic_results: list[OrganicResult] | None = None
    featured_snippets: list[FeaturedSnippet] | None = None
    people_also_ask: list[str] | None = None
    related_searches: list[str] | None = None
    videos: list[VideoResult] | None = None
    images: list[ImageResult] | None = None
    page_text: str | None = None

    @field_validator("page_text")
    @classmethod
    def truncate_page_text(cls, v: str | None) -> str | None:
        return truncate_text(v)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting regions that were not requested."""
        data = self.model_dump(mode="json", by_alias=True)
        for key in REGION_KEYS:
            alias = to_camel(key)
            if data.get(alias) is None:
                data.pop(alias, None)
        return data

    def region_counts(self) -> dict[str, int]:
        """Number of records per requested region."""
        counts: dict[str, int] = {}
        for key in REGION_KEYS:
            value = getattr(self, key)
            if value is not None:
                counts[key] = len(value)
        return counts


# =============================================================================
# Configuration
# =============================================================================


class OutputFormat(str, Enum):
    """Supported output encodings."""

    JSON = "json"
    TEXT = "text"
    CSV = "csv"
    HTML = "html"


class ExtractOptions(BaseModel):
    """Which result categories to extract."""

    organic_results: bool = True
    featured_snippets: bool = True
    people_also_ask: bool = True
    related_searches: bool = True
    videos: bool = True
    images: bool = False

    def enabled_regions(self) -> list[str]:
        """Enabled region keys in extraction order."""
        return [key for key in REGION_KEYS if getattr(self, key)]


class ScraperConfig(BaseModel):
    """Per-run configuration for SearchResultScraper."""

    query: str
    headless: bool = True
    slow_mo_ms: int = Field(default=50, ge=0)
    extract: ExtractOptions = Field(default_factory=ExtractOptions)
    output_formats: list[OutputFormat] = Field(
        default_factory=lambda: [OutputFormat.JSON, OutputFormat.TEXT]
    )
    output_dir: str = "./output"
    take_screenshot: bool = True
    follow_up_limit: int = Field(default=0, ge=0)
    follow_up_depth: int = Field(default=1, ge=0)

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Reject empty queries. The query is kept verbatim otherwise."""
        if not v.strip():
            raise ValueError("query cannot be empty")
        return v

    @classmethod
    def from_settings(cls, query: str, settings: Any, **overrides: Any) -> ScraperConfig:
        """Build a run configuration from loaded Settings.

        Args:
            query: Search query.
            settings: serpharvest.utils.config.Settings instance.
            **overrides: Fields that take precedence over settings.
        """
        values: dict[str, Any] = {
            "query": query,
            "headless": settings.browser.headless,
            "slow_mo_ms": settings.browser.slow_mo_ms,
            "extract": ExtractOptions(**settings.extract.model_dump()),
            "output_formats": settings.output.formats,
            "take_screenshot": settings.output.take_screenshot,
            "follow_up_limit": settings.output.follow_up_limit,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


DEFAULT_SEARCH_QUERY = "puppeteer tutorial"
DEFAULT_OUTPUT_FORMATS: list[OutputFormat] = [OutputFormat.JSON, OutputFormat.TEXT]
DEFAULT_CONFIG = ScraperConfig(query=DEFAULT_SEARCH_QUERY)

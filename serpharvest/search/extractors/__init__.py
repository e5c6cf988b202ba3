"""
Region extractors for the search results page.

Design Philosophy:
- One shared wait/extract/degrade routine in RegionExtractor
- Each category only maps a node to its record type
- A missing region degrades to [] and never fails the run
"""

from serpharvest.search.extractors.base import ExtractorState, RegionExtractor
from serpharvest.search.extractors.featured import FeaturedSnippetsExtractor
from serpharvest.search.extractors.images import ImageResultsExtractor
from serpharvest.search.extractors.organic import OrganicResultsExtractor
from serpharvest.search.extractors.questions import PeopleAlsoAskExtractor
from serpharvest.search.extractors.registry import (
    create_extractor,
    get_available_regions,
    get_extractor_class,
    register_extractor,
)
from serpharvest.search.extractors.related import RelatedSearchesExtractor
from serpharvest.search.extractors.videos import VideoResultsExtractor

# Register in extraction order
register_extractor("organic_results", OrganicResultsExtractor)
register_extractor("featured_snippets", FeaturedSnippetsExtractor)
register_extractor("people_also_ask", PeopleAlsoAskExtractor)
register_extractor("related_searches", RelatedSearchesExtractor)
register_extractor("videos", VideoResultsExtractor)
register_extractor("images", ImageResultsExtractor)

__all__ = [
    "ExtractorState",
    "RegionExtractor",
    "OrganicResultsExtractor",
    "FeaturedSnippetsExtractor",
    "PeopleAlsoAskExtractor",
    "RelatedSearchesExtractor",
    "VideoResultsExtractor",
    "ImageResultsExtractor",
    "create_extractor",
    "get_available_regions",
    "get_extractor_class",
    "register_extractor",
]

"""
Extractor registry.

Maps region keys to extractor classes.
"""

from __future__ import annotations

from typing import Any

from serpharvest.crawler.page import PageCapability
from serpharvest.search.extractors.base import RegionExtractor
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)

# Populated by __init__.py after all extractor modules are imported
_extractor_registry: dict[str, type[RegionExtractor]] = {}


def register_extractor(region: str, extractor_class: type[RegionExtractor]) -> None:
    """
    Register an extractor for a region key.

    Args:
        region: Region key (e.g. "organic_results").
        extractor_class: Class inheriting RegionExtractor.
    """
    if not issubclass(extractor_class, RegionExtractor):
        raise TypeError("Extractor must inherit from RegionExtractor")

    _extractor_registry[region] = extractor_class
    logger.debug("Registered extractor", region=region, extractor=extractor_class.__name__)


def get_extractor_class(region: str) -> type[RegionExtractor]:
    """
    Get the extractor class for a region key.

    Raises:
        KeyError: If no extractor is registered for region.
    """
    try:
        return _extractor_registry[region]
    except KeyError:
        raise KeyError(f"No extractor registered for region: {region}") from None


def create_extractor(region: str, page: PageCapability, **kwargs: Any) -> RegionExtractor:
    """Instantiate the extractor registered for region."""
    return get_extractor_class(region)(page, **kwargs)


def get_available_regions() -> list[str]:
    """Registered region keys in registration order."""
    return list(_extractor_registry)

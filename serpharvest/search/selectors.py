"""
Selector registry for the search results page.

Maps logical region and field names to CSS selectors. Built-in defaults
target Bing; config/selectors.yaml may override any of them so markup
changes can be patched without code changes.

Design Philosophy:
- Leaf data only, no behavior beyond lookup
- A region may list several fallback selectors; they are joined into one
  selector group so a single wait matches any of them
- Unknown names fail loudly (KeyError) rather than matching nothing
"""

from __future__ import annotations

import threading
from typing import Any

from pydantic import BaseModel, Field, field_validator

from serpharvest.utils.config import _deep_merge, get_config_dir, load_yaml_file
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)

SEARCH_ENGINE_URL = "https://www.bing.com/"

SEARCH_INPUT_SELECTORS: list[str] = [
    'input[name="q"]',
    "#sb_form_q",
    'input[aria-label="Enter your search term"]',
    "textarea#sb_form_q",
    'input[type="search"]',
]

SELECTORS: dict[str, str] = {
    "search_results": "#b_results",
    "organic_results": "li.b_algo",
    "featured_snippets": ".b_ans",
    "people_also_ask": ".df_qntext",
    "related_searches": ".b_rs li a",
    "videos": ".mc_vtvc",
    "images": ".imgpt",
    "main_content": "#b_content",
}

FIELD_SELECTORS: dict[str, str] = {
    "organic_title": "h2",
    "organic_url": "h2 a",
    "organic_snippet": ".b_caption p",
    "organic_deep_links": ".b_deep li a",
    "featured_source": ".b_attribution",
    "featured_link": "a",
    "paa_answer": ".b_ans",
    "video_title": ".mc_vtvc_title",
    "video_source": ".mc_vtvc_meta_channel",
    "video_duration": ".mc_bc",
    "video_link": "a",
    "video_play_button": ".mc_vtvc_center_play",
    "image_img": "img",
    "image_title": ".img_info",
    "image_link": "a",
    "image_dimensions": ".img_dimensions",
    "image_full_size": ".mimg",
    "follow_up_main": "main",
    "follow_up_body": "body",
}


# =============================================================================
# Pydantic Schema
# =============================================================================


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ValueError(f"Expected selector string or list, got {type(value).__name__}")
    selectors = [str(s).strip() for s in value if str(s).strip()]
    if not selectors:
        raise ValueError("Selector list cannot be empty")
    return selectors


class SelectorRegistry(BaseModel):
    """Region and field selectors for one search engine."""

    engine_url: str = SEARCH_ENGINE_URL
    input_selectors: list[str] = Field(default_factory=lambda: list(SEARCH_INPUT_SELECTORS))
    regions: dict[str, list[str]] = Field(
        default_factory=lambda: {k: [v] for k, v in SELECTORS.items()}
    )
    field_selectors: dict[str, str] = Field(default_factory=lambda: dict(FIELD_SELECTORS))

    @field_validator("input_selectors", mode="before")
    @classmethod
    def parse_input_selectors(cls, v: Any) -> list[str]:
        return _as_list(v)

    @field_validator("regions", mode="before")
    @classmethod
    def parse_regions(cls, v: Any) -> dict[str, list[str]]:
        if not isinstance(v, dict):
            raise ValueError("regions must be a mapping")
        return {name: _as_list(value) for name, value in v.items()}

    def region(self, name: str) -> str:
        """Selector group matching any fallback for a region."""
        return ", ".join(self.regions[name])

    def field_selector(self, name: str) -> str:
        """Selector for a field inside a region node."""
        return self.field_selectors[name]


# =============================================================================
# Loading
# =============================================================================


def load_selector_registry(overrides: dict[str, Any] | None = None) -> SelectorRegistry:
    """Build the registry from defaults, config/selectors.yaml and overrides.

    Args:
        overrides: Extra values merged last (mainly for tests).

    Returns:
        Validated SelectorRegistry.
    """
    base = SelectorRegistry().model_dump()
    path = get_config_dir() / "selectors.yaml"
    from_file = load_yaml_file(path)
    if from_file:
        logger.debug("Loaded selector overrides", path=str(path), keys=list(from_file))

    merged = _deep_merge(base, from_file)
    if overrides:
        merged = _deep_merge(merged, overrides)
    return SelectorRegistry(**merged)


_registry_instance: SelectorRegistry | None = None
_registry_lock = threading.Lock()


def get_selector_registry() -> SelectorRegistry:
    """Get the process-wide selector registry."""
    global _registry_instance

    if _registry_instance is None:
        with _registry_lock:
            if _registry_instance is None:
                _registry_instance = load_selector_registry()

    return _registry_instance


def reset_selector_registry() -> None:
    """Reset the registry (for testing)."""
    global _registry_instance

    with _registry_lock:
        _registry_instance = None

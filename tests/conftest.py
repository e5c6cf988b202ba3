"""
Pytest fixtures and configuration for serpharvest tests.

=============================================================================
Test Classification
=============================================================================

- @pytest.mark.unit: Single class/function, no external dependencies
  - All browser access goes through SnapshotPage or AsyncMock pages
  - DEFAULT: Tests without marker are auto-classified as unit

- @pytest.mark.integration: Several components wired together, still
  offline (SnapshotPage standing in for the browser)

- @pytest.mark.e2e: Real Chromium and network access
  - Skipped unless SERPHARVEST_E2E=1
  - Run with: SERPHARVEST_E2E=1 pytest -m e2e

=============================================================================
Mock Strategy
=============================================================================

- Browser: SnapshotPage over HTML fixtures, or AsyncMock page capabilities
- File I/O: tmp_path
- Delays: timeouts set to zero through SERPHARVEST_TIMEOUTS__* overrides
"""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

# Set test environment before importing anything else
os.environ["SERPHARVEST_CONFIG_DIR"] = str(Path(__file__).parent.parent / "config")

from serpharvest.crawler.snapshot_page import SnapshotPage  # noqa: E402
from serpharvest.search.selectors import SEARCH_ENGINE_URL, reset_selector_registry  # noqa: E402
from serpharvest.utils.config import reset_settings  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# =============================================================================
# Pytest Hooks for Test Classification
# =============================================================================


def pytest_configure(config):
    """Register custom markers for test classification."""
    config.addinivalue_line(
        "markers", "unit: Unit tests with no external dependencies (fast, <1s/test)"
    )
    config.addinivalue_line(
        "markers", "integration: Several components wired together, offline"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests with a real browser (skipped by default)"
    )


def pytest_collection_modifyitems(config, items):
    """Default unmarked tests to unit; skip e2e unless SERPHARVEST_E2E=1."""
    skip_e2e = pytest.mark.skip(reason="E2E tests need SERPHARVEST_E2E=1 and a browser")
    run_e2e = os.environ.get("SERPHARVEST_E2E") == "1"

    for item in items:
        has_classification = any(
            marker.name in ("unit", "integration", "e2e") for marker in item.iter_markers()
        )
        if not has_classification:
            item.add_marker(pytest.mark.unit)

        if not run_e2e and any(marker.name == "e2e" for marker in item.iter_markers()):
            item.add_marker(skip_e2e)


# =============================================================================
# Singleton Reset Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reload settings and selectors for every test."""
    reset_settings()
    reset_selector_registry()
    yield
    reset_settings()
    reset_selector_registry()


@pytest.fixture
def fast_timeouts(monkeypatch: pytest.MonkeyPatch) -> None:
    """Zero every delay and timeout so pipeline tests never sleep."""
    for key in (
        "NAVIGATION",
        "SETTLE_AFTER_NAVIGATION",
        "SEARCH_RESULTS",
        "STABILIZATION",
        "ORGANIC_RESULTS",
        "REGION",
        "FOLLOW_UP_NAVIGATION",
    ):
        monkeypatch.setenv(f"SERPHARVEST_TIMEOUTS__{key}", "0.0")
    reset_settings()


# =============================================================================
# HTML Fixtures
# =============================================================================


@pytest.fixture
def serp_html() -> str:
    """Bing results page with every region populated."""
    return (FIXTURES_DIR / "serp_html" / "bing_results.html").read_text(encoding="utf-8")


@pytest.fixture
def serp_page(serp_html: str) -> SnapshotPage:
    """SnapshotPage showing the results fixture."""
    return SnapshotPage(serp_html, url=SEARCH_ENGINE_URL)


@pytest.fixture
def empty_page() -> SnapshotPage:
    """SnapshotPage with a results container but no result regions."""
    return SnapshotPage(
        '<html><body><div id="b_content"><ol id="b_results"></ol></div></body></html>'
    )

"""
Command-line entry point for serpharvest.

    serpharvest [query] [output_dir] [--format json --format csv ...]

Exit code 0 on success, 1 on any error during the run.
"""

from __future__ import annotations

import asyncio
import re
import sys
from pathlib import Path

from serpharvest.output.formatter import coerce_format
from serpharvest.output.saver import ResultSaver
from serpharvest.scraper import SearchResultScraper, extract_from_html
from serpharvest.search.schemas import DEFAULT_SEARCH_QUERY, ScraperConfig, SearchResults
from serpharvest.utils.config import get_settings
from serpharvest.utils.logging import configure_logging, get_logger
from serpharvest.utils.timing import TimingCollector

logger = get_logger(__name__)


def default_output_dir(query: str) -> str:
    """``./search-results-<query>``, whitespace runs as dashes, lowercased."""
    slug = re.sub(r"\s+", "-", query).lower()
    return f"./search-results-{slug}"


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        description="Extract structured results from a search engine results page"
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=DEFAULT_SEARCH_QUERY,
        help=f'Search query (default: "{DEFAULT_SEARCH_QUERY}")',
    )
    parser.add_argument(
        "output_dir",
        nargs="?",
        default=None,
        help="Output directory (default: ./search-results-<query>)",
    )
    parser.add_argument(
        "--format", "-f",
        dest="formats",
        action="append",
        default=None,
        help="Output format: json, text, csv, html (repeatable; default from settings)",
    )
    parser.add_argument(
        "--follow-up",
        type=int,
        default=None,
        metavar="N",
        help="Visit the first N organic results and record an excerpt",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument(
        "--no-screenshot",
        action="store_true",
        help="Skip the full-page screenshot",
    )
    parser.add_argument(
        "--from-html",
        type=Path,
        default=None,
        metavar="PATH",
        help="Extract from a saved results page instead of launching a browser",
    )
    parser.add_argument(
        "--timing",
        action="store_true",
        help="Log per-stage timings at the end of the run",
    )
    parser.add_argument("--log-level", default=None, help="Log level (DEBUG, INFO, ...)")
    return parser


async def run(args) -> SearchResults:
    """Run one scrape from parsed CLI arguments."""
    settings = get_settings()
    formats = [coerce_format(f) for f in (args.formats or settings.output.formats)]
    output_dir = args.output_dir or default_output_dir(args.query)

    config = ScraperConfig.from_settings(
        args.query,
        settings,
        output_formats=formats,
        output_dir=output_dir,
        follow_up_limit=args.follow_up,
        headless=False if args.headed else None,
        take_screenshot=False if args.no_screenshot else None,
    )

    if args.from_html is not None:
        html = args.from_html.read_text(encoding="utf-8")
        results = await extract_from_html(html, config.query, config.extract)
        ResultSaver().save_results(results, output_dir, formats)
        return results

    timing = TimingCollector() if args.timing else None
    scraper = SearchResultScraper(config, timing=timing)
    results = await scraper.run()
    if timing is not None:
        logger.info("Stage timings", stages=timing.to_dict())
    return results


def cli(argv: list[str] | None = None) -> int:
    """Console entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(log_level=args.log_level)

    try:
        results = asyncio.run(run(args))
    except Exception as e:
        logger.error("Error running search scraper", error=str(e), error_type=type(e).__name__)
        return 1

    logger.info(
        "Search completed",
        query=results.query,
        counts=results.region_counts(),
    )
    return 0


def main() -> None:
    sys.exit(cli())


if __name__ == "__main__":
    main()

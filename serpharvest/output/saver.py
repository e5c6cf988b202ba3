"""
Result persistence.

Writes ``search-results.<ext>`` per requested format into an output
directory, plus an optional full-page ``search-results.png``.

Requested formats are validated before anything is written, so an unknown
format aborts without leaving partial output. Once writing starts, a
failure in one format is logged and the remaining formats still go out.
"""

from __future__ import annotations

from pathlib import Path

from serpharvest.crawler.page import PageCapability
from serpharvest.output.formatter import ResultFormatter, coerce_format, get_file_extension
from serpharvest.search.schemas import DEFAULT_OUTPUT_FORMATS, OutputFormat, SearchResults
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)

RESULTS_BASENAME = "search-results"


class ResultSaver:
    """Saves rendered results to files."""

    def __init__(self, formatter: ResultFormatter | None = None) -> None:
        self.formatter = formatter or ResultFormatter()

    def save_results(
        self,
        results: SearchResults,
        output_dir: str | Path,
        formats: list[OutputFormat | str] | None = None,
    ) -> dict[OutputFormat, Path]:
        """
        Save results in each format.

        Args:
            results: Aggregate to save.
            output_dir: Target directory, created if missing.
            formats: Formats to write. Defaults to json and text.

        Returns:
            Mapping of successfully written formats to file paths.

        Raises:
            UnsupportedFormatError: If any requested format is unknown.
        """
        requested = [coerce_format(f) for f in (formats or DEFAULT_OUTPUT_FORMATS)]

        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)

        written: dict[OutputFormat, Path] = {}
        for fmt in requested:
            path = self.save_in_format(results, directory, fmt)
            if path is not None:
                written[fmt] = path

        logger.info(
            "Results saved",
            output_dir=str(directory),
            formats=[f.value for f in written],
        )
        return written

    def save_in_format(
        self,
        results: SearchResults,
        output_dir: Path,
        fmt: OutputFormat,
    ) -> Path | None:
        """
        Render and write one format.

        Returns:
            Written path, or None if rendering or writing failed.
        """
        path = output_dir / f"{RESULTS_BASENAME}.{get_file_extension(fmt)}"
        try:
            content = self.formatter.render(results, fmt)
            path.write_text(content, encoding="utf-8")
        except Exception as e:
            logger.error("Failed to save results", format=fmt.value, path=str(path), error=str(e))
            return None

        logger.debug("Saved results file", format=fmt.value, path=str(path))
        return path

    async def take_screenshot(self, page: PageCapability, output_dir: str | Path) -> Path | None:
        """
        Save a full-page screenshot of the current page.

        Returns:
            Screenshot path, or None if it failed or nothing was rendered.
        """
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{RESULTS_BASENAME}.png"
        try:
            written = await page.screenshot(str(path), full_page=True)
        except Exception as e:
            logger.warning("Failed to take screenshot", path=str(path), error=str(e))
            return None
        if not written:
            return None

        logger.info("Screenshot saved", path=str(path))
        return path

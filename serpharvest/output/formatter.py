"""
Multi-format serializer for SearchResults.

Encodings:
- json: lossless, camelCase keys in model order, regions that were not
  requested are omitted; parse_json() restores an equal SearchResults
- text: human-readable sections, organic -> featured -> questions ->
  related -> videos -> images, each headed by its count
- csv: organic, featured and video row blocks
- html: self-contained styled document rendered from a Jinja2 template

Rendering is pure: nothing here touches the filesystem.
"""

from __future__ import annotations

import json
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from serpharvest.errors import UnsupportedFormatError
from serpharvest.search.schemas import OutputFormat, SearchResults
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
HTML_TEMPLATE = "results.html.j2"

FILE_EXTENSIONS: dict[OutputFormat, str] = {
    OutputFormat.JSON: "json",
    OutputFormat.TEXT: "txt",
    OutputFormat.CSV: "csv",
    OutputFormat.HTML: "html",
}

# Ampersand first so entities introduced by later replacements are not
# escaped again
_HTML_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)


def escape_html(value: str | None) -> str:
    """Escape the five markup-reserved characters."""
    if value is None:
        return ""
    text = str(value)
    for char, entity in _HTML_REPLACEMENTS:
        text = text.replace(char, entity)
    return text


def escape_csv_field(value: str | None) -> str:
    """Double embedded quotes. None becomes an empty field."""
    if value is None:
        return ""
    return value.replace('"', '""')


def coerce_format(fmt: OutputFormat | str) -> OutputFormat:
    """
    Resolve a format name.

    Raises:
        UnsupportedFormatError: If fmt is not a known format.
    """
    if isinstance(fmt, OutputFormat):
        return fmt
    try:
        return OutputFormat(fmt)
    except ValueError:
        raise UnsupportedFormatError(str(fmt)) from None


def get_file_extension(fmt: OutputFormat | str) -> str:
    """File extension used when saving a format."""
    return FILE_EXTENSIONS[coerce_format(fmt)]


class ResultFormatter:
    """Renders SearchResults into the supported encodings."""

    def __init__(self) -> None:
        self._env: Environment | None = None

    def _get_environment(self) -> Environment:
        if self._env is None:
            self._env = Environment(
                loader=FileSystemLoader(str(TEMPLATES_DIR)),
                trim_blocks=True,
                lstrip_blocks=True,
                # Every user-supplied value goes through the esc filter
                autoescape=False,
                undefined=StrictUndefined,
            )
            self._env.filters["esc"] = escape_html
        return self._env

    def render(self, results: SearchResults, fmt: OutputFormat | str) -> str:
        """
        Render results in the requested format.

        Args:
            results: Aggregate to render.
            fmt: OutputFormat or its string value.

        Returns:
            Rendered text.

        Raises:
            UnsupportedFormatError: If fmt is not a known format.
        """
        output_format = coerce_format(fmt)

        if output_format is OutputFormat.JSON:
            return self.format_json(results)
        if output_format is OutputFormat.TEXT:
            return self.format_text(results)
        if output_format is OutputFormat.CSV:
            return self.format_csv(results)
        return self.format_html(results)

    # =========================================================================
    # JSON
    # =========================================================================

    def format_json(self, results: SearchResults) -> str:
        return json.dumps(results.to_dict(), indent=2, ensure_ascii=False)

    @staticmethod
    def parse_json(text: str) -> SearchResults:
        """Restore SearchResults from format_json() output."""
        return SearchResults.model_validate_json(text)

    # =========================================================================
    # Text
    # =========================================================================

    def format_text(self, results: SearchResults) -> str:
        lines = [
            f'SEARCH RESULTS FOR: "{results.query}"',
            f"Extracted on: {results.timestamp}",
            "",
        ]

        if results.organic_results is not None:
            lines += [f"=== ORGANIC SEARCH RESULTS ({len(results.organic_results)}) ===", ""]
            for index, result in enumerate(results.organic_results, start=1):
                lines += [
                    f"Result #{index}:",
                    f"- Title: {result.title or 'N/A'}",
                    f"- URL: {result.url or 'N/A'}",
                    f"- Snippet: {result.snippet or 'N/A'}",
                ]
                if result.deep_links:
                    lines.append("- Deep Links:")
                    for link in result.deep_links:
                        lines.append(f"  * {link.text or 'N/A'}: {link.url or 'N/A'}")
                if result.follow_up_result is not None:
                    lines.append(f"- Follow-up Title: {result.follow_up_result.title or 'N/A'}")
                    lines.append(
                        f"- Follow-up Excerpt: {result.follow_up_result.excerpt or 'N/A'}"
                    )
                lines.append("")

        if results.featured_snippets is not None:
            lines += [f"=== FEATURED SNIPPETS ({len(results.featured_snippets)}) ===", ""]
            for index, snippet in enumerate(results.featured_snippets, start=1):
                lines += [f"Snippet #{index}:", snippet.content or "N/A"]
                if snippet.source:
                    lines.append(f"Source: {snippet.source}")
                lines.append("")

        for title, items in (
            ("PEOPLE ALSO ASK", results.people_also_ask),
            ("RELATED SEARCHES", results.related_searches),
        ):
            if items is None:
                continue
            lines += [f"=== {title} ({len(items)}) ===", ""]
            lines += [f"{index}. {item}" for index, item in enumerate(items, start=1)]
            lines.append("")

        if results.videos is not None:
            lines += [f"=== VIDEO RESULTS ({len(results.videos)}) ===", ""]
            for index, video in enumerate(results.videos, start=1):
                lines += [
                    f"Video #{index}:",
                    f"- Title: {video.title or 'N/A'}",
                    f"- Source: {video.source or 'N/A'}",
                ]
                if video.duration:
                    lines.append(f"- Duration: {video.duration}")
                if video.url:
                    lines.append(f"- URL: {video.url}")
                lines.append("")

        if results.images is not None:
            lines += [f"=== IMAGE RESULTS ({len(results.images)}) ===", ""]
            for index, image in enumerate(results.images, start=1):
                lines += [
                    f"Image #{index}:",
                    f"- Title: {image.title or 'N/A'}",
                    f"- Alt Text: {image.alt or 'N/A'}",
                ]
                if image.dimensions:
                    lines.append(f"- Dimensions: {image.dimensions}")
                if image.url:
                    lines.append(f"- URL: {image.url}")
                if image.src:
                    lines.append(f"- Source: {image.src}")
                lines.append("")

        return "\n".join(lines) + "\n"

    # =========================================================================
    # CSV
    # =========================================================================

    def format_csv(self, results: SearchResults) -> str:
        # Organic and featured headers print whenever the category was
        # requested; the video header only when there are video rows.
        # Featured and video headers carry a Position column, absent from
        # the legacy layout, so every header lines up with its rows.
        rows: list[str] = []

        if results.organic_results is not None:
            rows.append("Type,Position,Title,URL,Snippet")
            for result in results.organic_results:
                rows.append(
                    f"Organic,{result.position},"
                    f'"{escape_csv_field(result.title)}",'
                    f'"{escape_csv_field(result.url)}",'
                    f'"{escape_csv_field(result.snippet)}"'
                )
            rows.append("")

        if results.featured_snippets is not None:
            rows.append("Type,Position,Content,Source,URL")
            for index, snippet in enumerate(results.featured_snippets, start=1):
                rows.append(
                    f"Featured,{index},"
                    f'"{escape_csv_field(snippet.content)}",'
                    f'"{escape_csv_field(snippet.source)}",'
                    f'"{escape_csv_field(snippet.url)}"'
                )
            rows.append("")

        if results.videos:
            rows.append("Type,Position,Title,Source,Duration,URL")
            for index, video in enumerate(results.videos, start=1):
                rows.append(
                    f"Video,{index},"
                    f'"{escape_csv_field(video.title)}",'
                    f'"{escape_csv_field(video.source)}",'
                    f'"{escape_csv_field(video.duration)}",'
                    f'"{escape_csv_field(video.url)}"'
                )

        if not rows:
            return ""
        return "\n".join(rows) + "\n"

    # =========================================================================
    # HTML
    # =========================================================================

    def format_html(self, results: SearchResults) -> str:
        template = self._get_environment().get_template(HTML_TEMPLATE)
        return template.render(results=results)

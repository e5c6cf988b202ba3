"""Rendering and persistence of search results."""

from serpharvest.output.formatter import ResultFormatter, escape_csv_field, escape_html
from serpharvest.output.saver import ResultSaver

__all__ = [
    "ResultFormatter",
    "ResultSaver",
    "escape_csv_field",
    "escape_html",
]

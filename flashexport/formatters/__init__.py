"""Text formatters for the flat export formats."""

from .csv_export import export_csv
from .html import strip_html
from .json_export import export_json
from .markdown import export_markdown

__all__ = ["export_csv", "export_json", "export_markdown", "strip_html"]

# File: binran_search/report/__init__.py
"""binran_search.report: запись итогового JSON-индекса для поискового интерфейса."""

from .json_report import index_filename, render_json, write_index

__all__ = ["index_filename", "render_json", "write_index"]

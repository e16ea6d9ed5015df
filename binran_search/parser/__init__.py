"""binran_search.parser: HTML parsing helpers."""

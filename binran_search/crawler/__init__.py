"""binran_search.crawler: breadth-first crawl of the allowed site section."""

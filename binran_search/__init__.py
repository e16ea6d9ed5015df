"""
BinranSearch package initializer.
Defines package version; the CLI lives in :mod:`binran_search.cli`.
"""
__version__ = "0.1.0"

"""Cached data layer for tax qualification records."""

__version__ = "0.1.0"

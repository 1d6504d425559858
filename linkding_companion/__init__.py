"""Enrichment pipeline for bookmarks stored in a linkding instance."""

__version__ = "0.1.0"

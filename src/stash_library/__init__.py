"""Stash library: classify, enrich, persist and search saved links."""

__version__ = "0.1.0"

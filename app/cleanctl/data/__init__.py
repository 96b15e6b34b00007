"""Bundled data files (cleanup catalog)."""

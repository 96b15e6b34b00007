"""cleanctl - Selective disk cleanup for caches, temporary files and downloads."""

__version__ = "0.1.0"

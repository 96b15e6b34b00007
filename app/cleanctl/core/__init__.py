"""Core orchestration, catalog and configuration for cleanctl."""

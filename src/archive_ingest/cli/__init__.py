"""Command-line interface for archive-ingest."""

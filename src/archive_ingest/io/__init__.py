"""I/O adapters: feed connectors, archive readers and object-store writers."""

"""
archive-ingest - Versioned vendor archive ingestion.

Resolves the most recent version of a vendor-published archive on a remote
feed, extracts the requested member files into a cadence-partitioned staging
area and uploads them to object storage.
"""

__version__ = "0.1.0"

"""
archive-ingest orchestration package.

Provides the IngestService running resources end to end, and the Dagster ops,
jobs and schedules that execute it.
"""

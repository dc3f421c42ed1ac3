"""
Dagster Definitions module for archive-ingest, discovered by `dagster dev`.
"""

from dagster import Definitions

from .jobs import archive_ingest_job, daily_ingest_schedule

defs = Definitions(
    jobs=[archive_ingest_job],
    schedules=[daily_ingest_schedule],
)

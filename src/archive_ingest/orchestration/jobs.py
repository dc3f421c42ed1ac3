"""Dagster jobs and schedules for archive ingestion."""

from datetime import datetime, timezone
from typing import Any, Dict

import structlog
from dagster import RunRequest, ScheduleEvaluationContext, job, schedule

from .ops import ingest_resources_op

logger = structlog.get_logger(__name__)


@job
def archive_ingest_job() -> Any:
    """Resolve, download, extract and upload the configured vendor archives."""
    ingest_resources_op()


def build_run_config(resources=None, upload: bool = True) -> Dict[str, Any]:
    """Run config for archive_ingest_job."""
    return {
        "ops": {
            "ingest_resources_op": {
                "config": {"resources": list(resources or []), "upload": upload}
            }
        }
    }


@schedule(
    cron_schedule="30 6 * * *",  # 06:30 daily, after the vendor's overnight publish
    job=archive_ingest_job,
    execution_timezone="UTC",
)
def daily_ingest_schedule(context: ScheduleEvaluationContext) -> RunRequest:
    """Daily run over every resource in the catalogue."""
    scheduled_time = context.scheduled_execution_time or datetime.now(timezone.utc)
    scheduled_date = scheduled_time.strftime("%Y-%m-%d")
    logger.info("daily_ingest_schedule.triggered", scheduled_date=scheduled_date)
    return RunRequest(
        run_key=f"archive_ingest_{scheduled_date}",
        run_config=build_run_config(),
        tags={"scheduled_date": scheduled_date},
    )

"""Dagster ops wrapping IngestService.

Ops return JSON-serializable summaries and fail the step when any resource
run reported an error, so a partial failure is visible in the Dagster UI.
"""

from typing import Any, Dict, List

from dagster import Config, Failure, MetadataValue, OpExecutionContext, op
from pydantic import field_validator

from archive_ingest.config.resource_schema import load_resources_config
from archive_ingest.config.settings import get_settings
from archive_ingest.orchestration.ingest_service import IngestService


class IngestResourcesConfig(Config):
    """Configuration for the ingest op.

    An empty ``resources`` list runs every resource in the catalogue.
    """

    resources: List[str] = []
    upload: bool = True

    @field_validator("resources")
    @classmethod
    def validate_resources(cls, v: List[str]) -> List[str]:
        """Validate resource names exist in the catalogue."""
        if not v:
            return v
        catalogue = load_resources_config(get_settings().resources_config)
        unknown = [name for name in v if name not in catalogue.resources]
        if unknown:
            raise ValueError(
                f"Unknown resources {unknown}. Valid: {sorted(catalogue.resources)}"
            )
        return v


@op
def ingest_resources_op(
    context: OpExecutionContext, config: IngestResourcesConfig
) -> List[Dict[str, Any]]:
    """
    Read the configured resources from the feed and upload the extracted files.

    Returns:
        One summary dict per resource run

    Raises:
        Failure: If any resource run ended with an error
    """
    service = IngestService()
    try:
        results = service.ingest_all(config.resources or None, upload=config.upload)
    finally:
        service.close()

    summaries = [result.to_dict() for result in results]
    for summary in summaries:
        context.log.info(
            f"Resource '{summary['resource']}': archives={summary['archives']}, "
            f"files={len(summary['files'])}, uploads={len(summary['uploads'])}"
        )

    failed = [s for s in summaries if not s["ok"]]
    if failed:
        raise Failure(
            description=f"{len(failed)} of {len(summaries)} resources failed",
            metadata={
                "failed_resources": MetadataValue.json(
                    {s["resource"]: s["error"] for s in failed}
                )
            },
        )
    return summaries

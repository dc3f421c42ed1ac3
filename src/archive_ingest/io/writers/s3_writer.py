"""S3 upload of extracted files under a cadence/date partitioned key.

Keys follow ``<prefix>Weekly/<YYYY-MM-DD>/<file>`` for files from full
archives and ``<prefix>Daily/<YYYY-MM-DD>/<file>`` for everything else. The
date is the upload day, not the day the archive was published or extracted.
"""

from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from archive_ingest.config.settings import Settings, get_settings
from archive_ingest.io.connectors.exceptions import UploadFailedError
from archive_ingest.io.readers.archive_extractor import is_weekly_archive
from archive_ingest.utils.logging import get_logger

logger = get_logger(__name__)

WEEKLY_PARTITION = "Weekly"
DAILY_PARTITION = "Daily"


def destination_key(
    file_name: str, archive: str, today: Optional[date] = None
) -> str:
    """
    Build the storage key suffix for a file extracted from ``archive``.

    An empty archive name is returned unchanged, without any partition.
    """
    if archive == "":
        return archive

    partition = WEEKLY_PARTITION if is_weekly_archive(archive) else DAILY_PARTITION
    day = today or date.today()
    return f"{partition}/{day.isoformat()}/{file_name}"


class S3Writer:
    """Upload staged files to an S3 bucket."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        *,
        client: Any = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        clock: Callable[[], date] = date.today,
    ):
        """Initialize the writer.

        Args:
            bucket: S3 bucket name
            prefix: Key prefix (e.g., "vendor/")
            client: Pre-built boto3 S3 client; built from the other arguments if None
            region: AWS region (optional, uses default if not specified)
            endpoint_url: Custom endpoint URL for S3-compatible services
            aws_access_key_id: AWS access key (optional, uses default creds)
            aws_secret_access_key: AWS secret key (optional, uses default creds)
            clock: Source of the partition date
        """
        self.bucket = bucket
        self.prefix = prefix.rstrip("/") + "/" if prefix else ""
        self.clock = clock

        if client is None:
            client_kwargs: Dict[str, Any] = {}
            if region:
                client_kwargs["region_name"] = region
            if endpoint_url:
                client_kwargs["endpoint_url"] = endpoint_url
            if aws_access_key_id and aws_secret_access_key:
                client_kwargs["aws_access_key_id"] = aws_access_key_id
                client_kwargs["aws_secret_access_key"] = aws_secret_access_key
            client = boto3.client("s3", **client_kwargs)
        self._client = client

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "S3Writer":
        settings = settings or get_settings()
        return cls(
            settings.s3_bucket,
            settings.s3_prefix,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )

    def object_key(
        self, remote_file_name: str, archive: str, today: Optional[date] = None
    ) -> str:
        return self.prefix + destination_key(
            remote_file_name, archive, today or self.clock()
        )

    def write(
        self,
        src: Path,
        local_file_name: str,
        remote_file_name: str,
        archive: str,
        today: Optional[date] = None,
    ) -> int:
        """
        Upload ``src/local_file_name`` under the partitioned key for ``archive``.

        ``today`` pins the date partition; callers uploading a batch read the
        clock once so every file of the batch lands under the same date.

        Returns:
            Number of bytes uploaded

        Raises:
            UploadFailedError: If the file cannot be read or the upload fails
        """
        key = self.object_key(remote_file_name, archive, today)
        local_path = Path(src) / local_file_name
        logger.info("upload.started", file=remote_file_name, key=key)

        try:
            size = local_path.stat().st_size
            self._client.upload_file(str(local_path), self.bucket, key)
        except (OSError, ClientError, BotoCoreError, S3UploadFailedError) as e:
            raise UploadFailedError(
                f"Failed to upload {local_path} to s3://{self.bucket}/{key}: {e}",
                original_error=e,
                archive=archive,
                file_name=local_file_name,
                key=key,
            )

        logger.info("upload.completed", key=key, bucket=self.bucket, size=size)
        return size

"""
IngestService: run configured resources end to end.

For each resource:
- Prepare the staging root and its cadence directories
- Read the most recent archives from the feed (FeedReader)
- Upload every extracted file to S3 under its cadence/date key (S3Writer)
- Remove staged files and archives after a fully successful run (optional)

Each resource is an independent run: a failure stops that resource only.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from archive_ingest.config.resource_schema import (
    ResourcesConfig,
    ResourcesValidationError,
    ResourceSpec,
    load_resources_config,
)
from archive_ingest.config.settings import Settings, get_settings
from archive_ingest.io.connectors.exceptions import ArchiveIngestError, UploadFailedError
from archive_ingest.io.connectors.feed_client import build_feed_client
from archive_ingest.io.connectors.feed_reader import FeedReader
from archive_ingest.io.connectors.models import FeedReadResult, ZipCollection
from archive_ingest.io.readers.archive_extractor import ArchiveExtractor, CadenceDirs
from archive_ingest.io.writers.s3_writer import S3Writer
from archive_ingest.utils.logging import bind_context, get_logger

logger = get_logger(__name__)


@dataclass
class UploadRecord:
    archive: str
    file_name: str
    key: str
    size: int


@dataclass
class IngestResult:
    """Outcome of one resource run."""

    resource: str
    collections: List[ZipCollection] = field(default_factory=list)
    uploads: List[UploadRecord] = field(default_factory=list)
    read_error: Optional[ArchiveIngestError] = None
    upload_error: Optional[ArchiveIngestError] = None

    @property
    def error(self) -> Optional[ArchiveIngestError]:
        return self.read_error or self.upload_error

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable summary."""
        return {
            "resource": self.resource,
            "ok": self.ok,
            "archives": [c.archive for c in self.collections],
            "files": [f for c in self.collections for f in c.files_to_write],
            "uploads": [
                {"key": u.key, "size": u.size, "archive": u.archive}
                for u in self.uploads
            ],
            "error": self.error.to_dict() if self.error else None,
        }


class IngestService:
    """Read configured resources from the feed and upload the extracted files."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        reader: Optional[FeedReader] = None,
        writer: Optional[S3Writer] = None,
        resources: Optional[ResourcesConfig] = None,
    ):
        self.settings = settings or get_settings()
        self.reader = reader or FeedReader(
            build_feed_client(self.settings),
            extractor=ArchiveExtractor(
                CadenceDirs(weekly=self.settings.weekly_dir, daily=self.settings.daily_dir)
            ),
        )
        self._writer = writer
        self._resources = resources

    @property
    def writer(self) -> S3Writer:
        if self._writer is None:
            self._writer = S3Writer.from_settings(self.settings)
        return self._writer

    @property
    def resources(self) -> ResourcesConfig:
        if self._resources is None:
            self._resources = load_resources_config(self.settings.resources_config)
        return self._resources

    @property
    def cadence_dirs(self) -> CadenceDirs:
        return self.reader.extractor.cadence_dirs

    @property
    def staging_dir(self) -> Path:
        return Path(self.settings.staging_dir)

    def close(self) -> None:
        self.reader.close()

    def get_resource(self, name: str) -> ResourceSpec:
        if name not in self.resources.resources:
            available = sorted(self.resources.resources.keys())
            raise ResourcesValidationError(
                f"Resource '{name}' not found. Available: {available}"
            )
        return self.resources.resources[name]

    def resolve(self, name: str) -> List[str]:
        """Archive names a run of ``name`` would process, without downloading."""
        return self.reader.resolve_archives(self.get_resource(name))

    def ingest_all(
        self, names: Optional[Iterable[str]] = None, upload: bool = True
    ) -> List[IngestResult]:
        """
        Run the selected resources (all of them by default) one after another.

        Every name is checked against the catalogue before the first run, so
        a typo cannot abort a batch whose earlier resources were already
        uploaded. A failing run does not stop the ones after it.

        Raises:
            ResourcesValidationError: If any selected name is not in the catalogue
        """
        selected = list(names) if names else list(self.resources.resources.keys())
        unknown = [name for name in selected if name not in self.resources.resources]
        if unknown:
            raise ResourcesValidationError(
                f"Resources {unknown} not found. "
                f"Available: {sorted(self.resources.resources.keys())}"
            )

        results = [self.ingest_resource(name, upload=upload) for name in selected]

        logger.info(
            "ingest.batch_completed",
            resources=selected,
            failed=[r.resource for r in results if not r.ok],
        )
        return results

    def ingest_resource(self, name: str, upload: bool = True) -> IngestResult:
        """
        Run one resource: read from the feed, then upload what was extracted.

        Files extracted before a read failure are still uploaded; the first
        upload failure stops the upload step.
        """
        resource = self.get_resource(name)
        log = bind_context(resource=name, archive_path=resource.archive)
        self._prepare_staging()

        read_result = self.reader.read(resource, self.staging_dir)
        result = IngestResult(
            resource=name,
            collections=read_result.collections,
            read_error=read_result.error,
        )

        if upload:
            try:
                self._upload(read_result, result)
            except UploadFailedError as exc:
                log.error("ingest.upload_failed", **exc.to_dict())
                result.upload_error = exc

        if upload and result.ok and self.settings.cleanup_staging:
            self._cleanup(read_result)

        if result.ok:
            log.info(
                "ingest.completed",
                archives=[c.archive for c in result.collections],
                uploads=len(result.uploads),
            )
        else:
            log.error("ingest.failed", **result.error.to_dict())
        return result

    def _prepare_staging(self) -> None:
        for directory in (self.cadence_dirs.weekly, self.cadence_dirs.daily):
            (self.staging_dir / directory).mkdir(parents=True, exist_ok=True)

    def _upload(self, read_result: FeedReadResult, result: IngestResult) -> None:
        # one date partition per run, even across midnight
        upload_day = self.writer.clock()
        for collection in read_result.collections:
            src = self.staging_dir / self.cadence_dirs.for_archive(collection.archive)
            for file_name in collection.files_to_write:
                key = self.writer.object_key(file_name, collection.archive, upload_day)
                size = self.writer.write(
                    src, file_name, file_name, collection.archive, today=upload_day
                )
                result.uploads.append(
                    UploadRecord(
                        archive=collection.archive,
                        file_name=file_name,
                        key=key,
                        size=size,
                    )
                )

    def _cleanup(self, read_result: FeedReadResult) -> None:
        for collection in read_result.collections:
            src = self.staging_dir / self.cadence_dirs.for_archive(collection.archive)
            for file_name in collection.files_to_write:
                (src / file_name).unlink(missing_ok=True)
            (self.staging_dir / collection.archive).unlink(missing_ok=True)
        logger.debug("ingest.staging_cleaned", staging_dir=str(self.staging_dir))

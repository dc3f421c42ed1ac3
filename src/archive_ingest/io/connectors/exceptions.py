"""Ingest exceptions for archive resolution, extraction and upload failures.

Every failure carries an error kind, the pipeline stage it happened in and the
context needed to diagnose it without re-running (archive or file name, parsed
version numbers, search term).
"""

from enum import Enum
from typing import Any, Dict, Optional


class IngestStage(str, Enum):
    """Enum for ingest pipeline stages."""

    DIRECTORY_LISTING = "directory_listing"
    VERSION_RESOLUTION = "version_resolution"
    DOWNLOAD = "download"
    EXTRACTION = "extraction"
    UPLOAD = "upload"


class ErrorKind(str, Enum):
    """Enum for the terminal error kinds of a pipeline run."""

    DIRECTORY_NOT_FOUND = "directory_not_found"
    VERSION_MISSING = "version_missing"
    AMBIGUOUS_VERSION = "ambiguous_version"
    NO_MATCHING_ARCHIVE = "no_matching_archive"
    DOWNLOAD_FAILED = "download_failed"
    ARCHIVE_OPEN_FAILED = "archive_open_failed"
    MEMBER_OPEN_FAILED = "member_open_failed"
    DESTINATION_WRITE_FAILED = "destination_write_failed"
    UPLOAD_FAILED = "upload_failed"


class ArchiveIngestError(Exception):
    """Structured error for ingest failures with kind, stage and context."""

    kind: ErrorKind
    stage: IngestStage

    def __init__(
        self,
        message: str,
        *,
        original_error: Optional[BaseException] = None,
        **context: Any,
    ):
        self.original_error = original_error
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:  # pragma: no cover - trivial string repr
        return f"{self.kind.value} at stage '{self.stage.value}': {self.args[0]}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to structured dict for logging."""
        data: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "error_kind": self.kind.value,
            "failed_stage": self.stage.value,
            "message": str(self),
        }
        if self.original_error is not None:
            data["original_error_type"] = type(self.original_error).__name__
            data["original_error_message"] = str(self.original_error)
        data.update(self.context)
        return data


class DirectoryNotFoundError(ArchiveIngestError):
    kind = ErrorKind.DIRECTORY_NOT_FOUND
    stage = IngestStage.DIRECTORY_LISTING


class VersionMissingError(ArchiveIngestError):
    kind = ErrorKind.VERSION_MISSING
    stage = IngestStage.VERSION_RESOLUTION


class AmbiguousVersionError(ArchiveIngestError):
    kind = ErrorKind.AMBIGUOUS_VERSION
    stage = IngestStage.VERSION_RESOLUTION


class NoMatchingArchiveError(ArchiveIngestError):
    kind = ErrorKind.NO_MATCHING_ARCHIVE
    stage = IngestStage.VERSION_RESOLUTION


class DownloadFailedError(ArchiveIngestError):
    kind = ErrorKind.DOWNLOAD_FAILED
    stage = IngestStage.DOWNLOAD


class ArchiveOpenFailedError(ArchiveIngestError):
    kind = ErrorKind.ARCHIVE_OPEN_FAILED
    stage = IngestStage.EXTRACTION


class MemberOpenFailedError(ArchiveIngestError):
    kind = ErrorKind.MEMBER_OPEN_FAILED
    stage = IngestStage.EXTRACTION


class DestinationWriteFailedError(ArchiveIngestError):
    kind = ErrorKind.DESTINATION_WRITE_FAILED
    stage = IngestStage.EXTRACTION


class UploadFailedError(ArchiveIngestError):
    kind = ErrorKind.UPLOAD_FAILED
    stage = IngestStage.UPLOAD

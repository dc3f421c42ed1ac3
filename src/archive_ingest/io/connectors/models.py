"""
Models for feed connectors.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from archive_ingest.io.connectors.exceptions import ArchiveIngestError
from archive_ingest.io.connectors.version_parser import ArchiveVersion


@dataclass(frozen=True)
class DirectoryEntry:
    """One file listed in a remote feed directory."""

    name: str
    size: Optional[int] = None
    modified: Optional[datetime] = None


@dataclass(frozen=True)
class ArchiveCandidate:
    """Entry name paired with the version parsed from it."""

    name: str
    version: ArchiveVersion


@dataclass
class ZipCollection:
    """Files extracted from one archive, relative to its cadence directory."""

    archive: str
    files_to_write: List[str] = field(default_factory=list)


@dataclass
class FeedReadResult:
    """Outcome of reading one resource from the feed.

    Attributes:
        collections: One ZipCollection per fully processed archive, in order
        error: First failure of the run, if any; the archive being processed
            when it happened contributes nothing to ``collections``
    """

    collections: List[ZipCollection] = field(default_factory=list)
    error: Optional[ArchiveIngestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collections": [
                {"archive": c.archive, "files_to_write": list(c.files_to_write)}
                for c in self.collections
            ],
            "error": self.error.to_dict() if self.error else None,
        }

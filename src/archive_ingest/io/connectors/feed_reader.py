"""
FeedReader: resolve, download and extract the most recent archives of a resource.

Stages, run strictly in sequence:
- Directory listing of the resource's remote directory
- Weekly filter (full archives only) for weekly resources
- Version resolution (VersionResolver)
- Per archive: download, then selective extraction (ArchiveExtractor)

The first failure ends the run. It is returned inside FeedReadResult together
with the collections of the archives completed before it, never raised.
"""

import posixpath
import time
from pathlib import Path
from typing import List, Optional

from archive_ingest.config.resource_schema import ResourceSpec
from archive_ingest.io.connectors.exceptions import (
    ArchiveIngestError,
    DirectoryNotFoundError,
    DownloadFailedError,
)
from archive_ingest.io.connectors.feed_client import FeedClient
from archive_ingest.io.connectors.models import (
    DirectoryEntry,
    FeedReadResult,
    ZipCollection,
)
from archive_ingest.io.connectors.version_resolver import VersionResolver
from archive_ingest.io.readers.archive_extractor import (
    ArchiveExtractor,
    is_weekly_archive,
)
from archive_ingest.utils.logging import get_logger


class FeedReader:
    """Read the most recent archives of a resource from a feed into staging."""

    def __init__(
        self,
        client: FeedClient,
        resolver: Optional[VersionResolver] = None,
        extractor: Optional[ArchiveExtractor] = None,
    ):
        self.client = client
        self.resolver = resolver or VersionResolver()
        self.extractor = extractor or ArchiveExtractor()
        self.logger = get_logger(__name__)

    def close(self) -> None:
        self.client.close()

    def read(self, resource: ResourceSpec, dest: Path) -> FeedReadResult:
        """
        Download and extract the most recent archives of ``resource`` into ``dest``.

        Args:
            resource: Archive path, member list and cadence flag
            dest: Staging root; archives land here, members in its cadence dirs

        Returns:
            FeedReadResult with one ZipCollection per completed archive and
            the first error encountered, if any
        """
        collections: List[ZipCollection] = []
        self.logger.info(
            "feed_read.started", archive=resource.archive, is_weekly=resource.is_weekly
        )

        try:
            archives = self.resolve_archives(resource)
            for archive in archives:
                self._download(resource.directory, archive, Path(dest))
                files_to_write = self.extractor.extract(
                    archive, resource.members, Path(dest)
                )
                collections.append(
                    ZipCollection(archive=archive, files_to_write=files_to_write)
                )
        except ArchiveIngestError as exc:
            self.logger.error(
                "feed_read.failed",
                archive_path=resource.archive,
                completed=[c.archive for c in collections],
                **exc.to_dict(),
            )
            return FeedReadResult(collections=collections, error=exc)

        self.logger.info(
            "feed_read.completed",
            archive_path=resource.archive,
            archives=[c.archive for c in collections],
            files=sum(len(c.files_to_write) for c in collections),
        )
        return FeedReadResult(collections=collections)

    def resolve_archives(self, resource: ResourceSpec) -> List[str]:
        """
        List the resource directory and resolve its most recent archive names.

        Raises:
            DirectoryNotFoundError: If the directory cannot be listed
            VersionMissingError / AmbiguousVersionError: On a malformed entry
            NoMatchingArchiveError: If nothing matches the search term and version
        """
        entries = self._list_entries(resource.directory)
        if resource.is_weekly:
            entries = [entry for entry in entries if is_weekly_archive(entry.name)]
        return self.resolver.resolve(entries, resource.search_term)

    def _list_entries(self, directory: str) -> List[DirectoryEntry]:
        try:
            entries = self.client.list_directory(directory)
        except ArchiveIngestError:
            raise
        except Exception as exc:
            self.logger.warning("feed_read.directory_not_found", directory=directory)
            raise DirectoryNotFoundError(
                f"Could not find {directory} on the feed: {exc}",
                original_error=exc,
                directory=directory,
            )

        self.logger.debug(
            "feed_read.listed", directory=directory, entries=len(entries)
        )
        return entries

    def _download(self, directory: str, archive: str, dest: Path) -> None:
        start = time.time()
        remote_path = posixpath.join(directory, archive)
        self.logger.info("download.started", remote_path=remote_path)

        try:
            self.client.download(remote_path, dest)
        except ArchiveIngestError:
            raise
        except Exception as exc:
            raise DownloadFailedError(
                f"Failed to download {remote_path}: {exc}",
                original_error=exc,
                archive=archive,
                remote_path=remote_path,
            )

        self.logger.info(
            "download.completed",
            remote_path=remote_path,
            duration_ms=int((time.time() - start) * 1000),
        )

"""Most-recent archive resolution over a feed directory listing.

Resolution runs in two explicit passes:

1. ``find_most_recent`` parses every entry of the listing, not only the ones
   matching the search term, and keeps the highest (major, minor) pair. Any
   entry whose name cannot be parsed aborts the whole resolution.
2. ``select_matching`` re-scans the same listing and keeps every name that
   contains the search term and the decimal text of both the major and the
   minor number. The numeric check is a substring test on the name, not a
   comparison against the parsed fields.
"""

from typing import Iterable, List, Sequence

from archive_ingest.io.connectors.exceptions import NoMatchingArchiveError
from archive_ingest.io.connectors.models import ArchiveCandidate, DirectoryEntry
from archive_ingest.io.connectors.version_parser import ArchiveVersion, parse_version
from archive_ingest.utils.logging import get_logger

logger = get_logger(__name__)


class VersionResolver:
    """Select the archive names belonging to the most recent version."""

    def find_most_recent(self, names: Iterable[str]) -> ArchiveCandidate:
        """
        Return the entry with the highest (major, minor) version.

        The initial best is ("", v0_0), so a listing in which every entry is
        version (0, 0), or an empty listing, resolves to v0_0.

        Raises:
            VersionMissingError: If any name lacks a major or minor marker
            AmbiguousVersionError: If any name repeats a marker
        """
        best = ArchiveCandidate(name="", version=ArchiveVersion(major=0, minor=0))
        for name in names:
            version = parse_version(name)
            if version > best.version:
                best = ArchiveCandidate(name=name, version=version)

        logger.debug(
            "version_resolution.most_recent",
            name=best.name,
            version=str(best.version),
        )
        return best

    def select_matching(
        self, names: Iterable[str], search_term: str, version: ArchiveVersion
    ) -> List[str]:
        """Keep names containing the search term and both version numbers as text."""
        major = str(version.major)
        minor = str(version.minor)
        return [
            name
            for name in names
            if search_term in name and minor in name and major in name
        ]

    def resolve(
        self, entries: Sequence[DirectoryEntry], search_term: str
    ) -> List[str]:
        """
        Resolve the most recent archive names for a search term.

        Args:
            entries: Full directory listing (already cadence-filtered if needed)
            search_term: Substring the selected archive names must contain

        Returns:
            Matching archive names in listing order (one or more)

        Raises:
            VersionMissingError: If any entry lacks a version marker
            AmbiguousVersionError: If any entry repeats a version marker
            NoMatchingArchiveError: If no entry matches term and version
        """
        names = [entry.name for entry in entries]
        most_recent = self.find_most_recent(names)
        matches = self.select_matching(names, search_term, most_recent.version)

        if not matches:
            raise NoMatchingArchiveError(
                f"Found no matching files with name: {search_term}, "
                f"major version: {most_recent.version.major}, "
                f"or minor version: {most_recent.version.minor}",
                search_term=search_term,
                major_version=most_recent.version.major,
                minor_version=most_recent.version.minor,
            )

        logger.info(
            "version_resolution.completed",
            search_term=search_term,
            listed=len(names),
            version=str(most_recent.version),
            selected=matches,
        )
        return matches

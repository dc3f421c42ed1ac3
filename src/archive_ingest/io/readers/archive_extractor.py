"""Selective member extraction from downloaded ZIP archives.

Only members whose names contain one of the requested base names are copied
out. Members of a full (weekly) archive go to the weekly cadence directory,
members of any other archive to the daily one; the choice is made once per
archive from its own file name.
"""

import shutil
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from archive_ingest.io.connectors.exceptions import (
    ArchiveOpenFailedError,
    DestinationWriteFailedError,
    MemberOpenFailedError,
)
from archive_ingest.utils.logging import get_logger

logger = get_logger(__name__)

WEEKLY_MARKER = "full"
TEXT_EXTENSIONS = (".txt",)


def is_weekly_archive(archive_name: str) -> bool:
    """Full archives are published weekly, everything else daily."""
    return WEEKLY_MARKER in archive_name


def strip_text_extension(file_name: str) -> str:
    for extension in TEXT_EXTENSIONS:
        if file_name.endswith(extension):
            return file_name[: -len(extension)]
    return file_name


@dataclass(frozen=True)
class CadenceDirs:
    """Names of the weekly and daily staging subdirectories."""

    weekly: str = "weekly"
    daily: str = "daily"

    def for_archive(self, archive_name: str) -> str:
        return self.weekly if is_weekly_archive(archive_name) else self.daily


@dataclass
class ArchiveExtractor:
    """Copy requested members of an archive into its cadence directory."""

    cadence_dirs: CadenceDirs = CadenceDirs()

    def extract(
        self, archive_name: str, file_names: Sequence[str], dest: Path
    ) -> List[str]:
        """
        Extract members matching ``file_names`` from ``dest/archive_name``.

        A member matches a requested name when the member name contains the
        requested name with its ``.txt`` suffix removed. A member matching
        several requested names is copied (and reported) once per match.
        Files already written are left in place when a later member fails.

        Args:
            archive_name: File name of the archive downloaded into ``dest``
            file_names: Requested member names
            dest: Staging root holding the archive and the cadence directories

        Returns:
            Written file names relative to the cadence directory, in member order

        Raises:
            ArchiveOpenFailedError: If the archive cannot be opened
            MemberOpenFailedError: If a matching member cannot be opened
            DestinationWriteFailedError: If a member cannot be copied to its
                destination (unwritable target, corrupt or truncated member data)
        """
        archive_path = Path(dest) / archive_name
        cadence_dir = Path(dest) / self.cadence_dirs.for_archive(archive_name)
        # blank names are dropped; an empty substring would match every member
        base_names = [strip_text_extension(name) for name in file_names if name]

        try:
            archive = zipfile.ZipFile(archive_path)
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveOpenFailedError(
                f"Cannot open archive {archive_path}: {e}",
                original_error=e,
                archive=archive_name,
            )

        files_to_write: List[str] = []
        with archive:
            for member in archive.infolist():
                if member.is_dir():
                    continue
                for base_name in base_names:
                    if base_name not in member.filename:
                        continue
                    target = self._target_path(cadence_dir, archive_name, member.filename)
                    self._copy_member(archive, member, target, archive_name)
                    files_to_write.append(target.relative_to(cadence_dir).as_posix())

        logger.info(
            "extraction.completed",
            archive=archive_name,
            cadence_dir=str(cadence_dir),
            requested=base_names,
            extracted=files_to_write,
        )
        return files_to_write

    def _target_path(self, cadence_dir: Path, archive_name: str, member_name: str) -> Path:
        target = cadence_dir / member_name
        if not target.resolve().is_relative_to(cadence_dir.resolve()):
            raise DestinationWriteFailedError(
                f"Unsafe member path {member_name!r} in {archive_name}",
                archive=archive_name,
                member=member_name,
            )
        return target

    def _copy_member(
        self,
        archive: zipfile.ZipFile,
        member: zipfile.ZipInfo,
        target: Path,
        archive_name: str,
    ) -> None:
        try:
            source = archive.open(member)
        except (OSError, RuntimeError, NotImplementedError, zipfile.BadZipFile) as e:
            # RuntimeError: encrypted member; NotImplementedError: unknown compression
            raise MemberOpenFailedError(
                f"Cannot open member {member.filename} of {archive_name}: {e}",
                original_error=e,
                archive=archive_name,
                member=member.filename,
            )

        with source:
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                with open(target, "wb") as destination:
                    shutil.copyfileobj(source, destination)
            except (OSError, zipfile.BadZipFile, zlib.error, EOFError) as e:
                # BadZipFile: CRC mismatch; zlib.error, EOFError: corrupt or truncated data
                raise DestinationWriteFailedError(
                    f"Cannot write {target} from {archive_name}: {e}",
                    original_error=e,
                    archive=archive_name,
                    member=member.filename,
                    destination=str(target),
                )

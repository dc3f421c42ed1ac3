r"""Version parsing for vendor archive file names.

Archive names carry a major version after a literal ``v`` and a minor version
as the trailing ``_<digits>`` of the name, e.g. ``fds_prices_full_v2_3.zip``
is version (2, 3). A missing marker and a repeated marker are distinct errors.
"""

import re
from dataclasses import dataclass

from archive_ingest.io.connectors.exceptions import (
    AmbiguousVersionError,
    VersionMissingError,
)

ARCHIVE_SUFFIX = ".zip"

MAJOR_VERSION_PATTERN = re.compile(r"v(\d+)")  # v1, v12, ... anywhere in the name
MINOR_VERSION_PATTERN = re.compile(r"_(\d+)$")  # trailing _3, _17, ...


@dataclass(frozen=True, order=True)
class ArchiveVersion:
    """Major/minor pair; ordering compares major first, minor as tiebreak."""

    major: int
    minor: int

    def __str__(self) -> str:
        return f"v{self.major}_{self.minor}"


def strip_archive_suffix(file_name: str) -> str:
    if file_name.endswith(ARCHIVE_SUFFIX):
        return file_name[: -len(ARCHIVE_SUFFIX)]
    return file_name


def _parse_component(file_name: str, pattern: "re.Pattern[str]", component: str) -> int:
    matches = pattern.findall(strip_archive_suffix(file_name))
    if not matches:
        raise VersionMissingError(
            f"The {component} version is missing or not correctly specified in '{file_name}'",
            file_name=file_name,
            component=component,
        )
    if len(matches) > 1:
        raise AmbiguousVersionError(
            f"More than 1 {component} version found in '{file_name}': {matches}",
            file_name=file_name,
            component=component,
            candidates=list(matches),
        )
    try:
        return int(matches[0])
    except ValueError as e:
        raise VersionMissingError(
            f"The {component} version in '{file_name}' is not a number",
            original_error=e,
            file_name=file_name,
            component=component,
        )


def parse_major_version(file_name: str) -> int:
    """Return the number following the single ``v`` marker in ``file_name``."""
    return _parse_component(file_name, MAJOR_VERSION_PATTERN, "major")


def parse_minor_version(file_name: str) -> int:
    """Return the trailing ``_<digits>`` number of ``file_name``."""
    return _parse_component(file_name, MINOR_VERSION_PATTERN, "minor")


def parse_version(file_name: str) -> ArchiveVersion:
    """
    Parse the (major, minor) version embedded in an archive file name.

    Args:
        file_name: Archive name, with or without the ``.zip`` suffix

    Returns:
        ArchiveVersion parsed from the name

    Raises:
        VersionMissingError: If the major or minor marker is absent
        AmbiguousVersionError: If a marker occurs more than once
    """
    return ArchiveVersion(
        major=parse_major_version(file_name),
        minor=parse_minor_version(file_name),
    )

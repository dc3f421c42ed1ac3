"""Archive readers."""

from .archive_extractor import ArchiveExtractor, CadenceDirs, is_weekly_archive

__all__ = ["ArchiveExtractor", "CadenceDirs", "is_weekly_archive"]

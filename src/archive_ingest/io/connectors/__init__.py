"""Feed connectors: listing, version resolution and archive reading.

Keep this package import lightweight: the archive extractor imports
``exceptions`` from here, and FeedReader in turn imports the extractor.
FeedReader and the transport clients are therefore loaded lazily.
"""

from __future__ import annotations

import importlib
from typing import Any

from .exceptions import ArchiveIngestError, ErrorKind, IngestStage
from .models import DirectoryEntry, FeedReadResult, ZipCollection
from .version_parser import ArchiveVersion, parse_version

__all__ = [
    "ArchiveIngestError",
    "ErrorKind",
    "IngestStage",
    "DirectoryEntry",
    "FeedReadResult",
    "ZipCollection",
    "ArchiveVersion",
    "parse_version",
    "VersionResolver",
    "FeedReader",
    "FeedClient",
    "FTPFeedClient",
    "LocalFeedClient",
    "build_feed_client",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "VersionResolver": (".version_resolver", "VersionResolver"),
    "FeedReader": (".feed_reader", "FeedReader"),
    "FeedClient": (".feed_client", "FeedClient"),
    "FTPFeedClient": (".feed_client", "FTPFeedClient"),
    "LocalFeedClient": (".feed_client", "LocalFeedClient"),
    "build_feed_client": (".feed_client", "build_feed_client"),
}


def __getattr__(name: str) -> Any:
    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _LAZY_IMPORTS[name]
    module = importlib.import_module(module_name, __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(list(globals().keys()) + list(_LAZY_IMPORTS.keys())))

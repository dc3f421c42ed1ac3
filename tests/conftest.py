"""Shared pytest fixtures: ZIP builders and an in-memory feed client."""

from __future__ import annotations

import posixpath
import struct
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from archive_ingest.config.settings import get_settings
from archive_ingest.io.connectors.models import DirectoryEntry

LOCAL_HEADER_SIZE = 30


def build_zip(
    path: Path, members: Dict[str, bytes], compression: int = zipfile.ZIP_STORED
) -> Path:
    """Write a ZIP archive at ``path`` with the given member names and payloads."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=compression) as zf:
        for name, payload in members.items():
            zf.writestr(name, payload)
    return path


def corrupt_member_data(path: Path, member_name: str) -> Path:
    """Overwrite the first data byte of a member, leaving the headers intact.

    For a deflated member 0xFF starts a block of the reserved type, so
    decompression fails with ``zlib.error``.
    """
    with zipfile.ZipFile(path) as zf:
        offset = zf.getinfo(member_name).header_offset

    data = bytearray(path.read_bytes())
    name_len, extra_len = struct.unpack(
        "<HH", data[offset + LOCAL_HEADER_SIZE - 4 : offset + LOCAL_HEADER_SIZE]
    )
    data[offset + LOCAL_HEADER_SIZE + name_len + extra_len] = 0xFF
    path.write_bytes(bytes(data))
    return path


class FakeFeedClient:
    """In-memory feed: directory listings plus archive contents built on download.

    ``corrupt_members`` maps an archive name to a member whose deflated data
    is damaged after the archive is built.
    """

    def __init__(
        self,
        listings: Dict[str, List[str]],
        archives: Optional[Dict[str, Dict[str, bytes]]] = None,
        fail_downloads: Iterable[str] = (),
        corrupt_members: Optional[Dict[str, str]] = None,
    ):
        self.listings = listings
        self.archives = archives or {}
        self.fail_downloads = set(fail_downloads)
        self.corrupt_members = corrupt_members or {}
        self.downloads: List[str] = []
        self.closed = False

    def list_directory(self, path: str) -> List[DirectoryEntry]:
        if path not in self.listings:
            raise FileNotFoundError(f"No such directory: {path}")
        return [DirectoryEntry(name=name) for name in self.listings[path]]

    def download(self, remote_path: str, local_dir: Path) -> Path:
        self.downloads.append(remote_path)
        name = posixpath.basename(remote_path)
        if name in self.fail_downloads:
            raise ConnectionError(f"connection reset while fetching {remote_path}")

        local_path = build_zip(
            Path(local_dir) / name,
            self.archives.get(name, {}),
            compression=zipfile.ZIP_DEFLATED,
        )
        if name in self.corrupt_members:
            corrupt_member_data(local_path, self.corrupt_members[name])
        return local_path

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep host ENVIRONMENT values and cached settings out of the tests."""
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def fake_feed():
    return FakeFeedClient


@pytest.fixture
def corrupt_member():
    return corrupt_member_data

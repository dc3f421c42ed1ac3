"""Remote feed clients: directory listing and archive download.

The core only needs two calls from a feed, ``list_directory`` and
``download``. Two implementations are provided:

- FTPFeedClient: vendor FTP/FTPS server (ftplib), MLSD listing with an NLST
  fallback for servers that do not support it
- LocalFeedClient: a mounted or mirrored copy of the feed on local disk
"""

import ftplib
import posixpath
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol

from archive_ingest.config.settings import Settings, get_settings
from archive_ingest.io.connectors.models import DirectoryEntry
from archive_ingest.utils.logging import get_logger

logger = get_logger(__name__)

MLSD_TIME_FORMAT = "%Y%m%d%H%M%S"


class FeedClient(Protocol):
    """Transport contract consumed by FeedReader."""

    def list_directory(self, path: str) -> List[DirectoryEntry]: ...

    def download(self, remote_path: str, local_dir: Path) -> Path: ...

    def close(self) -> None: ...


def _parse_mlsd_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.strptime(value.split(".", 1)[0], MLSD_TIME_FORMAT)
    except ValueError:
        return None


class FTPFeedClient:
    """Feed client for the vendor FTP server; connects lazily on first use."""

    def __init__(
        self,
        host: str,
        *,
        port: int = 21,
        user: str = "anonymous",
        password: str = "",
        use_tls: bool = True,
        timeout: int = 60,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self._ftp: Optional[ftplib.FTP] = None

    def __enter__(self) -> "FTPFeedClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _connection(self) -> ftplib.FTP:
        if self._ftp is not None:
            return self._ftp

        ftp: ftplib.FTP = (
            ftplib.FTP_TLS(timeout=self.timeout)
            if self.use_tls
            else ftplib.FTP(timeout=self.timeout)
        )
        ftp.connect(self.host, self.port)
        ftp.login(self.user, self.password)
        if isinstance(ftp, ftplib.FTP_TLS):
            ftp.prot_p()
        logger.info(
            "feed.connected", host=self.host, port=self.port, tls=self.use_tls
        )
        self._ftp = ftp
        return ftp

    def list_directory(self, path: str) -> List[DirectoryEntry]:
        ftp = self._connection()
        try:
            return [
                DirectoryEntry(
                    name=name,
                    size=int(facts["size"]) if "size" in facts else None,
                    modified=_parse_mlsd_time(facts.get("modify")),
                )
                for name, facts in ftp.mlsd(path, facts=["type", "size", "modify"])
                if facts.get("type", "file") == "file"
            ]
        except ftplib.error_perm as e:
            if str(e).startswith("550"):
                raise FileNotFoundError(f"Feed directory not found: {path} ({e})") from e
            # 500/502: MLSD not supported by this server
            logger.debug("feed.mlsd_unsupported", path=path, error=str(e))

        return [DirectoryEntry(name=posixpath.basename(n)) for n in ftp.nlst(path)]

    def download(self, remote_path: str, local_dir: Path) -> Path:
        ftp = self._connection()
        local_path = Path(local_dir) / posixpath.basename(remote_path)
        temp_path = local_path.with_name(f"{local_path.name}.part")
        try:
            with temp_path.open("wb") as f:
                ftp.retrbinary(f"RETR {remote_path}", f.write)
            temp_path.replace(local_path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise
        return local_path

    def close(self) -> None:
        if self._ftp is None:
            return
        try:
            self._ftp.quit()
        except ftplib.all_errors:
            self._ftp.close()
        finally:
            self._ftp = None


class LocalFeedClient:
    """Feed client over a local directory tree mirroring the vendor feed."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / path.lstrip("/")

    def list_directory(self, path: str) -> List[DirectoryEntry]:
        directory = self._resolve(path)
        if not directory.is_dir():
            raise FileNotFoundError(f"Feed directory not found: {directory}")

        entries = []
        for item in sorted(directory.iterdir()):
            if not item.is_file():
                continue
            stat = item.stat()
            entries.append(
                DirectoryEntry(
                    name=item.name,
                    size=stat.st_size,
                    modified=datetime.fromtimestamp(stat.st_mtime),
                )
            )
        return entries

    def download(self, remote_path: str, local_dir: Path) -> Path:
        source = self._resolve(remote_path)
        local_path = Path(local_dir) / source.name
        shutil.copy2(source, local_path)
        return local_path

    def close(self) -> None:
        pass


def build_feed_client(settings: Optional[Settings] = None) -> FeedClient:
    """Create the feed client selected by ``feed_transport``."""
    settings = settings or get_settings()
    if settings.feed_transport == "local":
        return LocalFeedClient(Path(settings.feed_root))
    return FTPFeedClient(
        settings.feed_host,
        port=settings.feed_port,
        user=settings.feed_user,
        password=settings.feed_password,
        use_tls=settings.feed_use_tls,
        timeout=settings.feed_timeout,
    )

"""Unit tests for selective archive extraction into cadence directories."""

import zipfile
import zlib

import pytest

from archive_ingest.io.connectors.exceptions import (
    ArchiveOpenFailedError,
    DestinationWriteFailedError,
    ErrorKind,
    MemberOpenFailedError,
)
from archive_ingest.io.readers.archive_extractor import (
    ArchiveExtractor,
    CadenceDirs,
    is_weekly_archive,
    strip_text_extension,
)


class TestArchiveExtractor:
    """Test member selection, cadence routing and failure reporting"""

    def test_full_archive_extracts_into_weekly(self, tmp_path, make_zip):
        make_zip(
            tmp_path / "prices_full_v2_3.zip",
            {"prices_2021.txt": b"id|price\n1|9.5\n", "other.txt": b"x"},
        )

        written = ArchiveExtractor().extract(
            "prices_full_v2_3.zip", ["prices_2021.txt"], tmp_path
        )

        assert written == ["prices_2021.txt"]
        assert (tmp_path / "weekly" / "prices_2021.txt").read_bytes() == b"id|price\n1|9.5\n"
        assert not (tmp_path / "daily").exists()
        assert not (tmp_path / "weekly" / "other.txt").exists()

    def test_delta_archive_extracts_into_daily(self, tmp_path, make_zip):
        make_zip(tmp_path / "prices_v2_4.zip", {"prices_2021.txt": b"1"})

        written = ArchiveExtractor().extract("prices_v2_4.zip", ["prices_2021"], tmp_path)

        assert written == ["prices_2021.txt"]
        assert (tmp_path / "daily" / "prices_2021.txt").exists()

    def test_requested_name_matches_as_substring_in_member_order(self, tmp_path, make_zip):
        make_zip(
            tmp_path / "prices_full_v2_3.zip",
            {
                "prices_2022.txt": b"b",
                "rates_2022.txt": b"r",
                "prices_2021.txt": b"a",
            },
        )

        written = ArchiveExtractor().extract("prices_full_v2_3.zip", ["prices.txt"], tmp_path)

        assert written == ["prices_2022.txt", "prices_2021.txt"]

    def test_output_keeps_member_name_not_requested_name(self, tmp_path, make_zip):
        make_zip(tmp_path / "ent_full_v1_1.zip", {"ent_entity_coverage_hist.txt": b"c"})

        written = ArchiveExtractor().extract(
            "ent_full_v1_1.zip", ["ent_entity_coverage.txt"], tmp_path
        )

        assert written == ["ent_entity_coverage_hist.txt"]

    def test_member_matching_two_requests_is_listed_twice(self, tmp_path, make_zip):
        make_zip(tmp_path / "prices_full_v2_3.zip", {"prices_sec_2021.txt": b"s"})

        written = ArchiveExtractor().extract(
            "prices_full_v2_3.zip", ["prices", "sec"], tmp_path
        )

        assert written == ["prices_sec_2021.txt", "prices_sec_2021.txt"]
        assert (tmp_path / "weekly" / "prices_sec_2021.txt").read_bytes() == b"s"

    def test_blank_requested_names_are_ignored(self, tmp_path, make_zip):
        make_zip(
            tmp_path / "prices_full_v2_3.zip", {"prices.txt": b"p", "rates.txt": b"r"}
        )

        written = ArchiveExtractor().extract("prices_full_v2_3.zip", ["prices", ""], tmp_path)

        assert written == ["prices.txt"]

    def test_nested_members_and_directory_entries(self, tmp_path, make_zip):
        make_zip(
            tmp_path / "prices_full_v2_3.zip",
            {"history/": b"", "history/prices_2019.txt": b"h"},
        )

        written = ArchiveExtractor().extract("prices_full_v2_3.zip", ["prices"], tmp_path)

        assert written == ["history/prices_2019.txt"]
        assert (tmp_path / "weekly" / "history" / "prices_2019.txt").read_bytes() == b"h"

    def test_configured_cadence_dirs(self, tmp_path, make_zip):
        make_zip(tmp_path / "prices_full_v2_3.zip", {"prices.txt": b"p"})
        extractor = ArchiveExtractor(CadenceDirs(weekly="Weekly_Files", daily="Daily_Files"))

        extractor.extract("prices_full_v2_3.zip", ["prices"], tmp_path)

        assert (tmp_path / "Weekly_Files" / "prices.txt").exists()

    def test_missing_archive(self, tmp_path):
        with pytest.raises(ArchiveOpenFailedError) as exc_info:
            ArchiveExtractor().extract("prices_full_v2_3.zip", ["prices"], tmp_path)

        assert exc_info.value.kind == ErrorKind.ARCHIVE_OPEN_FAILED
        assert exc_info.value.context["archive"] == "prices_full_v2_3.zip"

    def test_corrupt_archive(self, tmp_path):
        (tmp_path / "prices_full_v2_3.zip").write_bytes(b"this is not a zip file")

        with pytest.raises(ArchiveOpenFailedError):
            ArchiveExtractor().extract("prices_full_v2_3.zip", ["prices"], tmp_path)

    def test_member_open_failure(self, tmp_path, make_zip, monkeypatch):
        make_zip(tmp_path / "prices_full_v2_3.zip", {"prices.txt": b"p"})

        def _encrypted(self, *args, **kwargs):
            raise RuntimeError("File 'prices.txt' is encrypted, password required")

        monkeypatch.setattr(zipfile.ZipFile, "open", _encrypted)

        with pytest.raises(MemberOpenFailedError) as exc_info:
            ArchiveExtractor().extract("prices_full_v2_3.zip", ["prices"], tmp_path)

        assert exc_info.value.context["member"] == "prices.txt"
        assert isinstance(exc_info.value.original_error, RuntimeError)

    def test_destination_write_failure_keeps_earlier_files(self, tmp_path, make_zip):
        make_zip(
            tmp_path / "prices_full_v2_3.zip",
            {"prices_a.txt": b"a", "prices_b/inner.txt": b"b"},
        )
        (tmp_path / "weekly").mkdir()
        (tmp_path / "weekly" / "prices_b").write_text("blocks the nested directory")

        with pytest.raises(DestinationWriteFailedError):
            ArchiveExtractor().extract("prices_full_v2_3.zip", ["prices"], tmp_path)

        assert (tmp_path / "weekly" / "prices_a.txt").read_bytes() == b"a"

    def test_corrupt_member_data_is_a_write_failure(self, tmp_path, make_zip, corrupt_member):
        archive = make_zip(
            tmp_path / "prices_full_v2_3.zip",
            {"prices_a.txt": b"a" * 32, "prices_b.txt": b"b" * 32},
            compression=zipfile.ZIP_DEFLATED,
        )
        corrupt_member(archive, "prices_b.txt")

        with pytest.raises(DestinationWriteFailedError) as exc_info:
            ArchiveExtractor().extract("prices_full_v2_3.zip", ["prices"], tmp_path)

        assert exc_info.value.context["member"] == "prices_b.txt"
        assert isinstance(exc_info.value.original_error, zlib.error)
        assert (tmp_path / "weekly" / "prices_a.txt").read_bytes() == b"a" * 32

    def test_stored_member_with_bad_crc_is_a_write_failure(
        self, tmp_path, make_zip, corrupt_member
    ):
        archive = make_zip(tmp_path / "prices_full_v2_3.zip", {"prices.txt": b"p" * 32})
        corrupt_member(archive, "prices.txt")

        with pytest.raises(DestinationWriteFailedError) as exc_info:
            ArchiveExtractor().extract("prices_full_v2_3.zip", ["prices"], tmp_path)

        assert isinstance(exc_info.value.original_error, zipfile.BadZipFile)

    def test_member_escaping_cadence_dir_is_rejected(self, tmp_path, make_zip):
        make_zip(tmp_path / "prices_full_v2_3.zip", {"../prices_evil.txt": b"x"})

        with pytest.raises(DestinationWriteFailedError):
            ArchiveExtractor().extract("prices_full_v2_3.zip", ["prices"], tmp_path)

        assert not (tmp_path / "prices_evil.txt").exists()


def test_is_weekly_archive():
    assert is_weekly_archive("fds_prices_full_v2_3.zip")
    assert not is_weekly_archive("fds_prices_v2_3.zip")


def test_strip_text_extension():
    assert strip_text_extension("prices_2021.txt") == "prices_2021"
    assert strip_text_extension("prices_2021.csv") == "prices_2021.csv"

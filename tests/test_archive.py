"""Tests for archive packaging."""

import io
import zipfile

import pytest

from paperknife.exceptions import ArchiveError
from paperknife.packaging import ArchiveBundle, ArchivePackager


def _read(data: bytes) -> list[tuple[str, bytes]]:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return [(info.filename, zf.read(info)) for info in zf.infolist()]


class TestArchivePackager:
    def test_entries_in_order(self):
        data = ArchivePackager().package([("b.pdf", b"B"), ("a.pdf", b"A")])

        assert _read(data) == [("b.pdf", b"B"), ("a.pdf", b"A")]

    def test_deterministic(self):
        entries = [("one.pdf", b"1" * 1000), ("two.pdf", b"2" * 1000)]

        assert ArchivePackager().package(entries) == ArchivePackager().package(entries)

    def test_fixed_timestamps(self):
        data = ArchivePackager().package([("a.pdf", b"A")])

        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert zf.infolist()[0].date_time == (1980, 1, 1, 0, 0, 0)
            assert zf.infolist()[0].compress_type == zipfile.ZIP_DEFLATED

    def test_duplicate_names_preserved(self):
        with pytest.warns(UserWarning, match="Duplicate name"):
            data = ArchivePackager().package([("a.pdf", b"1"), ("a.pdf", b"2")])

        assert [name for name, _ in _read(data)] == ["a.pdf", "a.pdf"]

    def test_empty_archive(self):
        assert _read(ArchivePackager().package([])) == []

    def test_failure_raises_archive_error(self):
        with pytest.raises(ArchiveError):
            ArchivePackager().package([("a.pdf", None)])


class TestArchiveBundle:
    def test_bundle(self):
        bundle = ArchiveBundle("out.zip")
        bundle.add("x.pdf", b"X")
        bundle.add("y.pdf", b"Y")

        assert len(bundle) == 2
        assert bundle.names == ["x.pdf", "y.pdf"]
        assert _read(bundle.to_bytes()) == [("x.pdf", b"X"), ("y.pdf", b"Y")]

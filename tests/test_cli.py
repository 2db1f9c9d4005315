"""Tests for the CLI module."""

import io
import zipfile
from pathlib import Path

import fitz  # PyMuPDF
import pytest

from paperknife.cli import main


@pytest.fixture
def forked_contexts(monkeypatch):
    """Run reconstruction contexts with fork so CLI tests stay fast."""
    monkeypatch.setenv("PAPERKNIFE_RECONSTRUCTION__START_METHOD", "fork")


@pytest.fixture
def pdf_file(tmp_path, make_pdf) -> Path:
    path = tmp_path / "input.pdf"
    path.write_bytes(make_pdf(pages=3))
    return path


class TestCLIBasics:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "compress" in capsys.readouterr().out

    def test_missing_input_file(self, tmp_path, caplog):
        result = main(["to-text", str(tmp_path / "missing.pdf")])

        assert result == 1
        assert "to-text failed" in caplog.text

    def test_unreadable_input(self, tmp_path, caplog):
        path = tmp_path / "junk.pdf"
        path.write_bytes(b"junk")

        assert main(["repair", str(path)]) == 1
        assert "Failed to read junk.pdf" in caplog.text

    def test_locked_input_needs_password(self, tmp_path, make_pdf, caplog):
        path = tmp_path / "secret.pdf"
        path.write_bytes(make_pdf(password="pw"))

        assert main(["to-text", str(path), "--output", str(tmp_path)]) == 1
        assert "password protected" in caplog.text

    def test_invalid_option(self, pdf_file, tmp_path, caplog):
        result = main(["watermark", str(pdf_file), "--text", "x", "--color", "blue"])

        assert result == 1
        assert "Invalid colour" in caplog.text


class TestCLICompress:
    def test_single_file(self, pdf_file, tmp_path, forked_contexts):
        out = tmp_path / "out"

        result = main(["compress", str(pdf_file), "--tier", "high", "--output", str(out)])

        assert result == 0
        with fitz.open(out / "input-compressed.pdf") as doc:
            assert len(doc) == 3

    def test_batch_writes_archive(self, tmp_path, make_pdf, forked_contexts):
        paths = []
        for name in ("one.pdf", "two.pdf"):
            path = tmp_path / name
            path.write_bytes(make_pdf(pages=1))
            paths.append(str(path))
        out = tmp_path / "out"

        result = main(["compress", *paths, "--output", str(out)])

        assert result == 0
        with zipfile.ZipFile(out / "paperknife-compressed.zip") as zf:
            assert zf.namelist() == ["one-compressed.pdf", "two-compressed.pdf"]

    def test_batch_with_bad_file(self, tmp_path, make_pdf, forked_contexts, caplog):
        good = tmp_path / "good.pdf"
        good.write_bytes(make_pdf(pages=1))
        bad = tmp_path / "bad.pdf"
        bad.write_bytes(b"junk")
        out = tmp_path / "out"

        result = main(["grayscale", str(good), str(bad), "--output", str(out)])

        assert result == 1
        assert (out / "good-grayscale.pdf").exists()
        assert "bad.pdf" in caplog.text


    def test_batch_with_wrong_password_file(self, tmp_path, make_pdf, forked_contexts, caplog):
        plain = tmp_path / "plain.pdf"
        plain.write_bytes(make_pdf(pages=1))
        other = tmp_path / "other.pdf"
        other.write_bytes(make_pdf(pages=1, password="other"))
        secret = tmp_path / "secret.pdf"
        secret.write_bytes(make_pdf(pages=1, password="pw"))
        out = tmp_path / "out"

        result = main([
            "compress", str(plain), str(other), str(secret),
            "--password", "pw", "--output", str(out),
        ])

        assert result == 1
        assert "Skipping other.pdf: incorrect password" in caplog.text
        with zipfile.ZipFile(out / "paperknife-compressed.zip") as zf:
            assert zf.namelist() == ["plain-compressed.pdf", "secret-compressed.pdf"]


class TestCLITools:
    def test_split_individual(self, pdf_file, tmp_path, forked_contexts):
        result = main([
            "split", str(pdf_file),
            "--pages", "1,3",
            "--individual",
            "--output", str(tmp_path),
        ])

        assert result == 0
        with zipfile.ZipFile(tmp_path / "input-split.zip") as zf:
            assert zf.namelist() == ["input-page-1.pdf", "input-page-3.pdf"]

    def test_rearrange(self, pdf_file, tmp_path, forked_contexts):
        assert main(["rearrange", str(pdf_file), "--order", "2,3,1", "--output", str(tmp_path)]) == 0

        with fitz.open(tmp_path / "input-rearranged.pdf") as doc:
            assert doc[0].get_text().strip() == "Page 2 content"

    def test_merge(self, tmp_path, make_pdf):
        a = tmp_path / "a.pdf"
        a.write_bytes(make_pdf(pages=1))
        b = tmp_path / "b.pdf"
        b.write_bytes(make_pdf(pages=2))

        assert main(["merge", str(a), str(b), "--output", str(tmp_path)]) == 0

        with fitz.open(tmp_path / "merged.pdf") as doc:
            assert len(doc) == 3

    def test_to_text(self, pdf_file, tmp_path):
        assert main(["to-text", str(pdf_file), "--output", str(tmp_path)]) == 0

        assert "--- Page 3 ---" in (tmp_path / "input.txt").read_text()

    def test_protect_then_unlock(self, pdf_file, tmp_path):
        assert main([
            "protect", str(pdf_file),
            "--new-password", "pw",
            "--confirm", "pw",
            "--output", str(tmp_path),
        ]) == 0
        protected = tmp_path / "input-protected.pdf"

        assert main(["unlock", str(protected), "--password", "pw", "--output", str(tmp_path)]) == 0

        with fitz.open(tmp_path / "input-protected-unlocked.pdf") as doc:
            assert not doc.needs_pass

    def test_to_images(self, pdf_file, tmp_path):
        assert main(["to-images", str(pdf_file), "--format", "png", "--output", str(tmp_path)]) == 0

        data = (tmp_path / "input-images.zip").read_bytes()
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert zf.namelist() == ["input-01.png", "input-02.png", "input-03.png"]

    def test_from_images(self, tmp_path, make_image, forked_contexts):
        image = tmp_path / "scan.png"
        image.write_bytes(make_image(40, 20))

        assert main(["from-images", str(image), "--name", "scans.pdf", "--output", str(tmp_path)]) == 0

        with fitz.open(tmp_path / "scans.pdf") as doc:
            assert len(doc) == 1

    def test_sign(self, pdf_file, tmp_path, make_image):
        image = tmp_path / "sig.png"
        image.write_bytes(make_image(80, 20))

        assert main(["sign", str(pdf_file), "--image", str(image), "--page", "2", "--output", str(tmp_path)]) == 0

        with fitz.open(tmp_path / "input-signed.pdf") as doc:
            assert len(doc[1].get_images()) == 1


class TestCLIInspection:
    def test_info(self, pdf_file, capsys):
        assert main(["info", str(pdf_file)]) == 0

        out = capsys.readouterr().out
        assert "Pages: 3" in out
        assert "Page 1 size: 595 x 842 pt" in out

    def test_info_locked(self, tmp_path, make_pdf, capsys):
        path = tmp_path / "secret.pdf"
        path.write_bytes(make_pdf(password="pw"))

        assert main(["info", str(path)]) == 0
        assert "Locked: yes" in capsys.readouterr().out

    def test_metadata_edit_and_show(self, pdf_file, tmp_path, capsys):
        assert main([
            "metadata", str(pdf_file),
            "--title", "Quarterly",
            "--output", str(tmp_path),
        ]) == 0

        assert main(["metadata", str(tmp_path / "input-metadata.pdf")]) == 0
        assert "title: Quarterly" in capsys.readouterr().out

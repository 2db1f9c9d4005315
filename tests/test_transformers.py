"""Tests for the document tools."""

import io
import zipfile

import fitz  # PyMuPDF
import pytest

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import (
    DocumentLoadError,
    IncorrectPasswordError,
    InvalidOptionError,
    NoImagesFoundError,
    NoUsablePagesError,
)
from paperknife.pages import PageCollection
from paperknife.transformers import (
    CompressTransformer,
    ExtractImagesTransformer,
    GrayscaleTransformer,
    ImageToPdfTransformer,
    MergeTransformer,
    MetadataTransformer,
    PageNumbersTransformer,
    PdfToImageTransformer,
    PdfToTextTransformer,
    ProtectTransformer,
    RearrangeTransformer,
    RepairTransformer,
    RotateTransformer,
    SignatureTransformer,
    SplitTransformer,
    UnlockTransformer,
    WatermarkTransformer,
    build_xmp_packet,
    read_metadata,
)
from paperknife.transformers.pdf_to_image import entry_name
from paperknife.transformers.watermark import parse_hex_color
from schemas.metadata import DocumentMetadata

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _open(data: bytes) -> fitz.Document:
    return fitz.open(stream=data, filetype="pdf")


def _texts(data: bytes) -> list[str]:
    with _open(data) as doc:
        return [page.get_text().strip() for page in doc]


def _zip(data: bytes) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


# ---------------------------------------------------------------------------
# Tests: Raster rebuild tools
# ---------------------------------------------------------------------------

class TestCompressTransformer:
    def test_compress(self, make_source, client):
        source = make_source(pages=3, size=(300, 500))
        progress = []

        output = CompressTransformer(tier="medium", client=client).transform(
            source, on_progress=progress.append
        )

        assert output.file_name == "report-compressed.pdf"
        assert output.media_type == "application/pdf"
        with _open(output.data) as doc:
            assert len(doc) == 3
            assert (doc[0].rect.width, doc[0].rect.height) == (300, 500)
            # text is rasterized away
            assert doc[0].get_text().strip() == ""
        assert progress[0] == 17
        assert progress[-1] == 100
        assert progress == sorted(progress)

    def test_default_tier_from_settings(self, monkeypatch, client):
        monkeypatch.setenv("PAPERKNIFE_DEFAULT_TIER", "low")

        transformer = CompressTransformer(client=client)

        assert transformer.tier == "low"
        assert transformer.policy.scale == 2.0

    def test_archive_name(self, client):
        assert CompressTransformer(client=client).archive_name == "paperknife-compressed.zip"

    def test_invalid_tier(self, client):
        with pytest.raises(ValueError):
            CompressTransformer(tier="extreme", client=client)


class TestGrayscaleTransformer:
    def test_grayscale(self, make_source, client):
        source = make_source(pages=1)

        output = GrayscaleTransformer(client=client).transform(source)

        assert output.file_name == "report-grayscale.pdf"
        with _open(output.data) as doc:
            xref = doc[0].get_images()[0][0]
            assert fitz.Pixmap(doc, xref).n == 1
        assert GrayscaleTransformer(client=client).archive_name == "paperknife-grayscale.zip"


class TestImageToPdfTransformer:
    def test_pages_at_image_size(self, make_image, client):
        images = [make_image(40, 20), make_image(30, 60, fmt="jpeg")]

        output = ImageToPdfTransformer(file_name="album.pdf", client=client).transform(images)

        assert output.file_name == "album.pdf"
        with _open(output.data) as doc:
            assert [(p.rect.width, p.rect.height) for p in doc] == [(40, 20), (30, 60)]

    def test_unsupported_image_skipped(self, make_image, client):
        output = ImageToPdfTransformer(client=client).transform([b"GIF89a", make_image()])

        assert output.file_name == "paperknife.pdf"
        assert "image 1" in output.warnings[0]
        with _open(output.data) as doc:
            assert len(doc) == 1

    def test_no_usable_images(self, client):
        with pytest.raises(NoUsablePagesError):
            ImageToPdfTransformer(client=client).transform([b"not an image"])


# ---------------------------------------------------------------------------
# Tests: Page edit tools
# ---------------------------------------------------------------------------

class TestSplitTransformer:
    def test_single(self, make_source, client):
        source = make_source(pages=5)

        output = SplitTransformer("2-3,5", client=client).transform(source)

        assert output.file_name == "report-split.pdf"
        assert _texts(output.data) == ["Page 2 content", "Page 3 content", "Page 5 content"]

    def test_individual(self, make_source, client):
        source = make_source(pages=4)

        output = SplitTransformer("1,4", mode="individual", client=client).transform(source)

        assert output.kind == "archive"
        assert output.file_name == "report-split.zip"
        entries = _zip(output.data)
        assert list(entries) == ["report-page-1.pdf", "report-page-4.pdf"]
        assert _texts(entries["report-page-4.pdf"]) == ["Page 4 content"]

    def test_no_valid_pages(self, make_source, client):
        with pytest.raises(InvalidOptionError):
            SplitTransformer("9-12", client=client).transform(make_source(pages=3))

    def test_collection_selection_and_order(self, make_source, client):
        source = make_source(pages=3)
        collection = PageCollection(3)
        collection.toggle(2)
        collection.move(2, 0)

        output = SplitTransformer(collection=collection, client=client).transform(source)

        assert _texts(output.data) == ["Page 3 content", "Page 1 content"]
        assert collection.result is output

    def test_collection_size_mismatch(self, make_source, client):
        transformer = SplitTransformer(collection=PageCollection(9), client=client)

        with pytest.raises(InvalidOptionError):
            transformer.transform(make_source(pages=3))

    def test_unknown_mode(self):
        with pytest.raises(InvalidOptionError):
            SplitTransformer("1", mode="all")


class TestRearrangeTransformer:
    def test_new_order(self, make_source, client):
        output = RearrangeTransformer([3, 1, 2], client=client).transform(make_source(pages=3))

        assert output.file_name == "report-rearranged.pdf"
        assert _texts(output.data) == ["Page 3 content", "Page 1 content", "Page 2 content"]

    def test_order_must_be_permutation(self, make_source, client):
        with pytest.raises(InvalidOptionError):
            RearrangeTransformer([1, 1, 2], client=client).transform(make_source(pages=3))


class TestRotateTransformer:
    def test_rotate_all(self, make_source, client):
        output = RotateTransformer(90, client=client).transform(make_source(pages=2))

        with _open(output.data) as doc:
            assert [page.rotation for page in doc] == [90, 90]

    def test_rotate_selected(self, make_source, client):
        output = RotateTransformer(180, "2", client=client).transform(make_source(pages=3))

        with _open(output.data) as doc:
            assert [page.rotation for page in doc] == [0, 180, 0]

    def test_collection_rotations(self, make_source, client):
        collection = PageCollection(2)
        collection.rotate(1, 270)

        output = RotateTransformer(collection=collection, client=client).transform(
            make_source(pages=2)
        )

        with _open(output.data) as doc:
            assert [page.rotation for page in doc] == [270, 0]

    def test_invalid_angle(self):
        with pytest.raises(InvalidOptionError):
            RotateTransformer(45)


# ---------------------------------------------------------------------------
# Tests: In-process tools
# ---------------------------------------------------------------------------

class TestMergeTransformer:
    def test_merge_in_order(self, make_source):
        first = make_source(pages=2, name="a.pdf", label="A")
        second = make_source(pages=1, name="b.pdf", label="B")
        progress = []

        output = MergeTransformer().transform([second, first], on_progress=progress.append)

        assert output.file_name == "merged.pdf"
        assert _texts(output.data) == ["B 1 content", "A 1 content", "A 2 content"]
        assert progress == [50, 100]

    def test_needs_two_documents(self, make_source):
        with pytest.raises(InvalidOptionError):
            MergeTransformer().transform([make_source()])


class TestWatermarkTransformer:
    def test_text_on_every_page(self, make_source):
        output = WatermarkTransformer("CONFIDENTIAL", color="#ff0000").transform(
            make_source(pages=2)
        )

        assert output.file_name == "report-watermarked.pdf"
        assert all("CONFIDENTIAL" in text for text in _texts(output.data))

    def test_parse_hex_color(self):
        assert parse_hex_color("#ff0000") == (1.0, 0.0, 0.0)
        assert parse_hex_color("000000") == (0.0, 0.0, 0.0)

    @pytest.mark.parametrize("color", ["red", "#fff", "#gggggg"])
    def test_invalid_color(self, color):
        with pytest.raises(InvalidOptionError):
            WatermarkTransformer("x", color=color)

    def test_invalid_options(self):
        with pytest.raises(InvalidOptionError):
            WatermarkTransformer("  ")
        with pytest.raises(InvalidOptionError):
            WatermarkTransformer("x", opacity=1.5)


class TestPageNumbersTransformer:
    def test_default_labels(self, make_source):
        output = PageNumbersTransformer().transform(make_source(pages=2))

        texts = _texts(output.data)
        assert "Page 1 of 2" in texts[0]
        assert "Page 2 of 2" in texts[1]

    def test_custom_format_and_start(self, make_source):
        output = PageNumbersTransformer("{n}", start=10).transform(make_source(pages=2))

        assert _texts(output.data)[1].endswith("11")

    def test_anchor_positions(self):
        rect = fitz.Rect(0, 0, 200, 100)

        bottom_left = PageNumbersTransformer(position="bottom-left").anchor(rect, 20)
        top_right = PageNumbersTransformer(position="top-right").anchor(rect, 20)
        center = PageNumbersTransformer().anchor(rect, 20)

        assert (bottom_left.x, bottom_left.y) == (30, 70)
        assert (top_right.x, top_right.y) == (150, 42)
        assert center.x == 90

    def test_invalid_position(self):
        with pytest.raises(InvalidOptionError):
            PageNumbersTransformer(position="middle")

    def test_invalid_format(self, make_source):
        with pytest.raises(InvalidOptionError):
            PageNumbersTransformer("{page}").transform(make_source(pages=1))


class TestPdfToImageTransformer:
    def test_jpeg_export(self, make_source):
        source = make_source(pages=3, size=(100, 50))

        output = PdfToImageTransformer().transform(source)

        entries = _zip(output.data)
        assert list(entries) == ["report-01.jpg", "report-02.jpg", "report-03.jpg"]
        pix = fitz.Pixmap(entries["report-01.jpg"])
        assert (pix.width, pix.height) == (200, 100)

    def test_png_export(self, make_source):
        output = PdfToImageTransformer("png").transform(make_source(pages=1))

        assert list(_zip(output.data)) == ["report-01.png"]

    def test_entry_padding(self):
        assert entry_name("doc", 7, 9, "jpg") == "doc-07.jpg"
        assert entry_name("doc", 7, 120, "jpg") == "doc-007.jpg"

    def test_invalid_format(self):
        with pytest.raises(InvalidOptionError):
            PdfToImageTransformer("gif")


class TestExtractImagesTransformer:
    def test_extract(self, make_pdf, make_image):
        doc = _open(make_pdf(pages=2))
        doc[0].insert_image(fitz.Rect(0, 0, 40, 20), stream=make_image(40, 20))
        doc[1].insert_image(fitz.Rect(0, 0, 30, 30), stream=make_image(30, 30, fmt="jpeg"))
        source = SourceDocument.open("pics.pdf", doc.tobytes())
        doc.close()

        output = ExtractImagesTransformer().transform(source)

        entries = _zip(output.data)
        assert list(entries) == ["image-001.png", "image-002.png"]
        assert fitz.Pixmap(entries["image-002.png"]).width == 30
        source.close()

    def test_no_images(self, make_source):
        with pytest.raises(NoImagesFoundError):
            ExtractImagesTransformer().transform(make_source())


class TestMetadataTransformer:
    def test_write_and_read(self, make_source):
        metadata = DocumentMetadata(title="Annual Report", author="Finance", keywords="q1, q2")

        output = MetadataTransformer(metadata).transform(make_source())

        updated = SourceDocument.open("out.pdf", output.data)
        assert read_metadata(updated).title == "Annual Report"
        assert read_metadata(updated).author == "Finance"
        doc = updated.open_copy()
        assert "Annual Report" in doc.get_xml_metadata()
        doc.close()
        updated.close()

    def test_deep_clean(self, make_source):
        tagged = MetadataTransformer(DocumentMetadata(title="Secret")).transform(make_source())
        source = SourceDocument.open("tagged.pdf", tagged.data)

        output = MetadataTransformer(deep_clean=True).transform(source)

        assert output.file_name == "tagged-cleaned.pdf"
        with _open(output.data) as doc:
            assert not doc.metadata.get("title")
            assert doc.get_xml_metadata() == ""
        source.close()

    def test_xmp_packet(self):
        packet = build_xmp_packet(
            DocumentMetadata(title="T", author="A", keywords="x, y", creator="C", producer="P")
        )

        assert packet.startswith("<?xpacket begin=")
        assert packet.endswith('<?xpacket end="w"?>')
        assert "<dc:title>" in packet
        assert "<rdf:li>x</rdf:li>" in packet
        assert "<xmp:CreatorTool>C</xmp:CreatorTool>" in packet


class TestProtectAndUnlock:
    def test_protect(self, make_source):
        output = ProtectTransformer("s3cret", "s3cret").transform(make_source(pages=2))

        assert output.file_name == "report-protected.pdf"
        with _open(output.data) as doc:
            assert doc.needs_pass
            assert doc.authenticate("s3cret")
            assert "AES" in doc.metadata["encryption"]

    @pytest.mark.parametrize(("password", "confirm"), [("", ""), ("a", "b")])
    def test_protect_validation(self, password, confirm):
        with pytest.raises(InvalidOptionError):
            ProtectTransformer(password, confirm)

    def test_unlock(self, make_pdf):
        source = SourceDocument.open("secret.pdf", make_pdf(pages=2, password="pw"))

        output = UnlockTransformer(password="pw").transform(source)

        assert output.file_name == "secret-unlocked.pdf"
        assert output.warnings == []
        with _open(output.data) as doc:
            assert not doc.needs_pass
            assert len(doc) == 2
        source.close()

    def test_unlock_wrong_password(self, make_pdf):
        source = SourceDocument.open("secret.pdf", make_pdf(password="pw"))

        with pytest.raises(IncorrectPasswordError):
            UnlockTransformer(password="nope").transform(source)
        source.close()

    def test_unlock_unprotected(self, make_source):
        output = UnlockTransformer().transform(make_source())

        assert "not password protected" in output.warnings[0]


class TestRepairTransformer:
    def test_repair_damaged_xref(self, make_pdf):
        data = make_pdf(pages=2)
        broken = data[: data.rfind(b"startxref")]
        source = SourceDocument.open("broken.pdf", broken)

        output = RepairTransformer().transform(source)

        assert output.file_name == "broken-repaired.pdf"
        assert output.warnings
        with _open(output.data) as doc:
            assert len(doc) == 2
        source.close()

    def test_repair_clean_file(self, make_source):
        output = RepairTransformer().transform(make_source())

        assert output.warnings == []


class TestPdfToTextTransformer:
    def test_page_blocks(self, make_source):
        output = PdfToTextTransformer().transform(make_source(pages=2))

        assert output.kind == "text"
        assert output.file_name == "report.txt"
        text = output.data.decode("utf-8")
        assert text == "--- Page 1 ---\nPage 1 content\n\n--- Page 2 ---\nPage 2 content\n"


class TestSignatureTransformer:
    def test_sign_last_page(self, make_source, make_image):
        output = SignatureTransformer(make_image(100, 50), page_id=-1).transform(
            make_source(pages=2)
        )

        assert output.file_name == "report-signed.pdf"
        with _open(output.data) as doc:
            assert doc[0].get_images() == []
            assert len(doc[1].get_images()) == 1

    def test_placement_keeps_aspect_and_stays_on_page(self, make_image):
        transformer = SignatureTransformer(make_image(100, 50), x=90, y=95, width=20)

        rect = transformer.placement(fitz.Rect(0, 0, 500, 1000))

        assert rect.width == pytest.approx(100)
        assert rect.height == pytest.approx(50)
        assert rect.x1 <= 500 and rect.y1 <= 1000

    def test_page_out_of_range(self, make_source, make_image):
        with pytest.raises(InvalidOptionError):
            SignatureTransformer(make_image(), page_id=5).transform(make_source(pages=2))

    def test_unsupported_image(self):
        with pytest.raises(DocumentLoadError):
            SignatureTransformer(b"GIF89a")

"""Pytest fixtures for paperknife tests."""

import fitz  # PyMuPDF
import pytest

from paperknife.config import ReconstructionConfig, get_settings
from paperknife.documents.source import SourceDocument
from paperknife.reconstruction.client import ReconstructionClient

A4 = (595, 842)


def _make_pdf(
    pages: int = 1,
    size: tuple[float, float] = A4,
    label: str = "Page",
    password: str | None = None,
) -> bytes:
    """Build a PDF with *pages* text pages, optionally AES-256 encrypted."""
    doc = fitz.open()
    for i in range(pages):
        page = doc.new_page(width=size[0], height=size[1])
        page.insert_text((50, 100), f"{label} {i + 1} content")
    if password:
        data = doc.tobytes(
            encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw=password, user_pw=password
        )
    else:
        data = doc.tobytes()
    doc.close()
    return data


def _make_image(width: int = 40, height: int = 20, fmt: str = "png") -> bytes:
    """Build a solid-colour PNG or JPEG of the given pixel size."""
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(180)
    return pix.tobytes(fmt)


@pytest.fixture
def make_pdf():
    """Factory for in-memory PDF bytes."""
    return _make_pdf


@pytest.fixture
def make_image():
    """Factory for in-memory PNG/JPEG bytes."""
    return _make_image


@pytest.fixture
def make_source():
    """Factory for opened SourceDocuments; closes them after the test."""
    opened = []

    def factory(pages: int = 3, name: str = "report.pdf", **kwargs) -> SourceDocument:
        source = SourceDocument.open(name, _make_pdf(pages, **kwargs))
        opened.append(source)
        return source

    yield factory
    for source in opened:
        source.close()


@pytest.fixture
def reconstruction_config():
    """Fast reconstruction settings for tests (forked contexts, short timeouts)."""
    return ReconstructionConfig(
        start_method="fork",
        timeout_sec=60.0,
        poll_interval_sec=0.01,
        cancel_grace_sec=0.5,
    )


@pytest.fixture
def client(reconstruction_config):
    return ReconstructionClient(reconstruction_config)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Make every test read settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

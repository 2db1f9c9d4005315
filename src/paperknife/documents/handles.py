"""Decoded document handles.

A DocumentHandle is the engine's view of something that has pages and can
render them. Rasterization and thumbnailing only talk to this interface, so
they do not care whether the pages come from a PDF or from a set of images.
"""

import logging
from abc import ABC, abstractmethod

import fitz  # PyMuPDF

from paperknife.exceptions import DocumentLoadError

logger = logging.getLogger(__name__)

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"


class DocumentHandle(ABC):
    """Abstract base class for decoded documents.

    Attributes:
        kind: Short tag naming the backing format
    """

    kind: str = "abstract"

    @property
    @abstractmethod
    def page_count(self) -> int:
        pass

    @abstractmethod
    def page_size(self, page_id: int) -> tuple[float, float]:
        """Return (width, height) of a page in points."""
        pass

    @abstractmethod
    def render(self, page_id: int, scale: float, grayscale: bool = False) -> fitz.Pixmap:
        """Render a page to a pixmap at ``scale`` (1.0 = 72 DPI)."""
        pass

    def close(self) -> None:
        pass

    def check_page(self, page_id: int) -> None:
        if not 1 <= page_id <= self.page_count:
            raise IndexError(f"Page {page_id} out of range (1-{self.page_count})")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class PdfHandle(DocumentHandle):
    """Handle over an opened (and, if needed, authenticated) PyMuPDF document."""

    kind = "pdf"

    def __init__(self, doc: fitz.Document):
        self.doc = doc

    def __repr__(self) -> str:
        return f"PdfHandle(pages={self.page_count})"

    @property
    def page_count(self) -> int:
        return len(self.doc)

    def page_size(self, page_id: int) -> tuple[float, float]:
        self.check_page(page_id)
        rect = self.doc[page_id - 1].rect
        return rect.width, rect.height

    def render(self, page_id: int, scale: float, grayscale: bool = False) -> fitz.Pixmap:
        self.check_page(page_id)
        page = self.doc[page_id - 1]
        colorspace = fitz.csGRAY if grayscale else fitz.csRGB
        return page.get_pixmap(
            matrix=fitz.Matrix(scale, scale), colorspace=colorspace, alpha=False
        )

    def close(self) -> None:
        if not self.doc.is_closed:
            self.doc.close()


def image_filetype(data: bytes) -> str:
    """Return the PyMuPDF filetype for PNG or JPEG bytes.

    Raises:
        DocumentLoadError: If the bytes are neither PNG nor JPEG
    """
    if data.startswith(PNG_MAGIC):
        return "png"
    if data.startswith(JPEG_MAGIC):
        return "jpeg"
    raise DocumentLoadError("Unsupported image format (expected PNG or JPEG)")


def probe_image(index: int, data: bytes) -> tuple[int, int]:
    """Return an image's pixel size.

    Raises:
        DocumentLoadError: If the bytes are not a decodable PNG or JPEG
    """
    image_filetype(data)
    try:
        pix = fitz.Pixmap(data)
    except Exception as e:
        raise DocumentLoadError(f"Failed to decode image {index}: {e}") from e
    return pix.width, pix.height


class ImageSetHandle(DocumentHandle):
    """Handle over an ordered set of images, one image per page.

    Page size is the image size in pixels, taken as points.
    """

    kind = "images"

    def __init__(self, images: list[bytes]):
        self.images = list(images)
        self._sizes = [probe_image(i, data) for i, data in enumerate(self.images, start=1)]

    @classmethod
    def collect(cls, images: list[bytes]) -> tuple["ImageSetHandle", list[str]]:
        """Build a handle from the decodable images, skipping the rest.

        Returns:
            The handle and one warning per skipped image
        """
        usable = []
        warnings = []
        for i, data in enumerate(images, start=1):
            try:
                probe_image(i, data)
            except DocumentLoadError as e:
                message = f"Skipped image {i}: {e.message}"
                logger.warning(message)
                warnings.append(message)
                continue
            usable.append(data)
        return cls(usable), warnings

    def __repr__(self) -> str:
        return f"ImageSetHandle(pages={self.page_count})"

    @property
    def page_count(self) -> int:
        return len(self.images)

    def page_size(self, page_id: int) -> tuple[float, float]:
        self.check_page(page_id)
        width, height = self._sizes[page_id - 1]
        return float(width), float(height)

    def image_bytes(self, page_id: int) -> bytes:
        self.check_page(page_id)
        return self.images[page_id - 1]

    def image_format(self, page_id: int) -> str:
        return image_filetype(self.image_bytes(page_id))

    def render(self, page_id: int, scale: float, grayscale: bool = False) -> fitz.Pixmap:
        pix = fitz.Pixmap(self.image_bytes(page_id))
        if pix.alpha:
            pix = fitz.Pixmap(pix, 0)
        target = fitz.csGRAY if grayscale else fitz.csRGB
        if pix.colorspace is None or pix.colorspace.n != target.n:
            pix = fitz.Pixmap(target, pix)
        if scale != 1.0:
            width = max(1, round(pix.width * scale))
            height = max(1, round(pix.height * scale))
            pix = fitz.Pixmap(pix, width, height, None)
        return pix

"""Place a signature image on a page."""

import logging

import fitz  # PyMuPDF

from paperknife.documents.handles import image_filetype
from paperknife.documents.source import SourceDocument
from paperknife.exceptions import InvalidOptionError
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

from .transformer import SAVE_OPTIONS, DocumentTransformer, ProgressCallback

logger = logging.getLogger(__name__)


class SignatureTransformer(DocumentTransformer):
    """Stamp a PNG or JPEG signature onto one page.

    Position and width are percentages of the page size, measured from the
    top-left corner. The image keeps its aspect ratio and is moved inside
    the page if it would overflow.

    Attributes:
        image: Signature image bytes
        page_id: 1-based target page; negative values count from the end (-1 is the last page)
        x: Left edge, percent of page width
        y: Top edge, percent of page height
        width: Signature width, percent of page width
    """

    suffix = "signed"

    def __init__(
        self,
        image: bytes,
        page_id: int = 1,
        x: float = 60,
        y: float = 80,
        width: float = 25,
    ):
        image_filetype(image)
        if not 0 < width <= 100:
            raise InvalidOptionError(f"Width must be between 0 and 100 percent, got {width}")
        if not (0 <= x <= 100 and 0 <= y <= 100):
            raise InvalidOptionError("Position must be between 0 and 100 percent")
        self.image = image
        self.page_id = page_id
        self.x = x
        self.y = y
        self.width = width

        pix = fitz.Pixmap(image)
        self.aspect = pix.height / pix.width
        pix = None

    def placement(self, rect: fitz.Rect) -> fitz.Rect:
        """Target rectangle for the signature on a page of ``rect``."""
        w = rect.width * self.width / 100
        h = w * self.aspect
        x0 = max(rect.x0, min(rect.x0 + rect.width * self.x / 100, rect.x1 - w))
        y0 = max(rect.y0, min(rect.y0 + rect.height * self.y / 100, rect.y1 - h))
        return fitz.Rect(x0, y0, x0 + w, y0 + h)

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        doc = source.open_copy()
        try:
            page_id = self.page_id if self.page_id > 0 else len(doc) + 1 + self.page_id
            if not 1 <= page_id <= len(doc):
                raise InvalidOptionError(
                    f"Page {self.page_id} out of range (1-{len(doc)})"
                )
            page = doc[page_id - 1]
            page.insert_image(self.placement(page.rect), stream=self.image, keep_proportion=True)
            data = doc.tobytes(**SAVE_OPTIONS)
        finally:
            doc.close()

        if on_progress:
            on_progress(100)
        logger.info(f"Signed page {page_id} of {source.name}")
        return ToolOutput.document(source.output_name(self.suffix), data)

"""Extract embedded images as PNG files."""

import logging

import fitz  # PyMuPDF

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import NoImagesFoundError
from paperknife.packaging.archive import ArchiveBundle
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

from .transformer import DocumentTransformer, ProgressCallback, report_progress

logger = logging.getLogger(__name__)


def image_png(doc: fitz.Document, xref: int) -> bytes:
    """Decode an image object to PNG, converting CMYK and similar to RGB."""
    pix = fitz.Pixmap(doc, xref)
    if pix.n - pix.alpha >= 4:
        pix = fitz.Pixmap(fitz.csRGB, pix)
    return pix.tobytes("png")


class ExtractImagesTransformer(DocumentTransformer):
    """Collect every distinct embedded image into an archive.

    Images shared by several pages are extracted once, in order of first use.
    """

    suffix = "images"

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        bundle = ArchiveBundle(f"{source.stem}-{self.suffix}.zip")
        warnings = []
        seen: set[int] = set()

        doc = source.open_copy()
        try:
            total = len(doc)
            for page_number, page in enumerate(doc, start=1):
                for image in page.get_images(full=True):
                    xref = image[0]
                    if xref in seen:
                        continue
                    seen.add(xref)
                    try:
                        bundle.add(f"image-{len(bundle) + 1:03d}.png", image_png(doc, xref))
                    except Exception as e:
                        message = f"Skipped image {xref} on page {page_number}: {e}"
                        logger.warning(message)
                        warnings.append(message)
                report_progress(on_progress, page_number, total)
        finally:
            doc.close()

        if not len(bundle):
            raise NoImagesFoundError(f"No embedded images found in {source.name}")

        logger.info(f"Extracted {len(bundle)} images from {source.name}")
        return ToolOutput.archive(bundle.name, bundle.to_bytes(), warnings=warnings)

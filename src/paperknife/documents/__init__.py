"""Document loading and decoded page sources."""

from .handles import DocumentHandle, ImageSetHandle, PdfHandle, image_filetype, probe_image
from .source import SourceDocument, open_pdf

__all__ = [
    "DocumentHandle",
    "ImageSetHandle",
    "PdfHandle",
    "SourceDocument",
    "image_filetype",
    "probe_image",
    "open_pdf",
]

"""Transformers: one per document tool."""

from .compress import CompressTransformer, RasterRebuildTransformer
from .extract_images import ExtractImagesTransformer
from .grayscale import GrayscaleTransformer
from .image_to_pdf import ImageToPdfTransformer
from .merge import MergeTransformer
from .metadata import MetadataTransformer, build_xmp_packet, read_metadata
from .page_edit import PageEditTransformer
from .page_numbers import PageNumbersTransformer
from .pdf_to_image import PdfToImageTransformer
from .pdf_to_text import PdfToTextTransformer
from .protect import ProtectTransformer
from .rearrange import RearrangeTransformer
from .repair import RepairTransformer
from .rotate import RotateTransformer
from .signature import SignatureTransformer
from .split import SplitTransformer
from .transformer import DocumentTransformer, ImageSetTransformer, MultiDocumentTransformer
from .unlock import UnlockTransformer
from .watermark import WatermarkTransformer

__all__ = [
    "DocumentTransformer",
    "MultiDocumentTransformer",
    "ImageSetTransformer",
    "RasterRebuildTransformer",
    "PageEditTransformer",
    "CompressTransformer",
    "GrayscaleTransformer",
    "MergeTransformer",
    "SplitTransformer",
    "RearrangeTransformer",
    "RotateTransformer",
    "WatermarkTransformer",
    "PageNumbersTransformer",
    "PdfToImageTransformer",
    "ImageToPdfTransformer",
    "ExtractImagesTransformer",
    "MetadataTransformer",
    "ProtectTransformer",
    "UnlockTransformer",
    "RepairTransformer",
    "PdfToTextTransformer",
    "SignatureTransformer",
    "build_xmp_packet",
    "read_metadata",
]

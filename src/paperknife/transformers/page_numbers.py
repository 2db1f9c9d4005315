"""Page numbering."""

import logging

import fitz  # PyMuPDF

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import InvalidOptionError
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

from .transformer import SAVE_OPTIONS, DocumentTransformer, ProgressCallback, report_progress

logger = logging.getLogger(__name__)

POSITIONS = (
    "bottom-center",
    "bottom-left",
    "bottom-right",
    "top-center",
    "top-left",
    "top-right",
)

DEFAULT_FORMAT = "Page {n} of {total}"


class PageNumbersTransformer(DocumentTransformer):
    """Write a page label on every page.

    Attributes:
        label_format: Label template with ``{n}`` (page number) and ``{total}``
        start: Number given to the first page
        position: One of POSITIONS
        margin: Distance from the page edges in points
        font_size: Font size in points
    """

    suffix = "numbered"

    def __init__(
        self,
        label_format: str = DEFAULT_FORMAT,
        start: int = 1,
        position: str = "bottom-center",
        margin: float = 30,
        font_size: float = 12,
    ):
        if position not in POSITIONS:
            raise InvalidOptionError(
                f"Unknown position {position!r} (expected one of {', '.join(POSITIONS)})"
            )
        self.label_format = label_format
        self.start = start
        self.position = position
        self.margin = margin
        self.font_size = font_size

    def label(self, index: int, total: int) -> str:
        """Label for the page at 0-based ``index``."""
        try:
            return self.label_format.format(n=self.start + index, total=total)
        except (KeyError, IndexError, ValueError) as e:
            raise InvalidOptionError(f"Invalid label format {self.label_format!r}: {e}") from e

    def anchor(self, rect: fitz.Rect, text_width: float) -> fitz.Point:
        """Baseline origin of a label ``text_width`` wide."""
        vertical, horizontal = self.position.split("-")
        if horizontal == "left":
            x = rect.x0 + self.margin
        elif horizontal == "right":
            x = rect.x1 - self.margin - text_width
        else:
            x = rect.x0 + (rect.width - text_width) / 2

        if vertical == "top":
            y = rect.y0 + self.margin + self.font_size
        else:
            y = rect.y1 - self.margin
        return fitz.Point(x, y)

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        doc = source.open_copy()
        try:
            total = len(doc)
            for index, page in enumerate(doc):
                text = self.label(index, total)
                width = fitz.get_text_length(text, fontname="helv", fontsize=self.font_size)
                page.insert_text(
                    self.anchor(page.rect, width),
                    text,
                    fontname="helv",
                    fontsize=self.font_size,
                    color=(0, 0, 0),
                )
                report_progress(on_progress, index + 1, total)
            data = doc.tobytes(**SAVE_OPTIONS)
        finally:
            doc.close()

        logger.info(f"Numbered {total} pages of {source.name}")
        return ToolOutput.document(source.output_name(self.suffix), data)

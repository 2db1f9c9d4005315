"""Text watermarks.

The text is drawn on every page, centred on the page and turned about the
page centre, with a fill colour and opacity.
"""

import logging
import re

import fitz  # PyMuPDF

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import InvalidOptionError
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

from .transformer import SAVE_OPTIONS, DocumentTransformer, ProgressCallback, report_progress

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def parse_hex_color(value: str) -> tuple[float, float, float]:
    """Convert ``#rrggbb`` to an RGB triple in [0, 1].

    Raises:
        InvalidOptionError: If ``value`` is not a six-digit hex colour
    """
    match = HEX_COLOR.match(value.strip())
    if not match:
        raise InvalidOptionError(f"Invalid colour {value!r} (expected #rrggbb)")
    digits = match.group(1)
    return tuple(int(digits[i : i + 2], 16) / 255 for i in (0, 2, 4))


class WatermarkTransformer(DocumentTransformer):
    """Stamp a text watermark on every page.

    Attributes:
        text: Watermark text
        color: RGB fill colour in [0, 1]
        opacity: Fill opacity in [0, 1]
        font_size: Font size in points
        rotation: Counter-clockwise angle in degrees
    """

    suffix = "watermarked"

    def __init__(
        self,
        text: str,
        color: str = "#808080",
        opacity: float = 0.3,
        font_size: float = 50,
        rotation: float = 45,
    ):
        if not text.strip():
            raise InvalidOptionError("Watermark text must not be empty")
        if not 0 <= opacity <= 1:
            raise InvalidOptionError(f"Opacity must be between 0 and 1, got {opacity}")
        if font_size <= 0:
            raise InvalidOptionError(f"Font size must be positive, got {font_size}")
        self.text = text
        self.color = parse_hex_color(color)
        self.opacity = opacity
        self.font_size = font_size
        self.rotation = rotation
        self.font = fitz.Font("helv")

    def _stamp(self, page: fitz.Page) -> None:
        rect = page.rect
        center = fitz.Point(rect.x0 + rect.width / 2, rect.y0 + rect.height / 2)
        text_width = self.font.text_length(self.text, fontsize=self.font_size)
        origin = fitz.Point(center.x - text_width / 2, center.y + self.font_size / 3)

        writer = fitz.TextWriter(rect, opacity=self.opacity, color=self.color)
        writer.append(origin, self.text, font=self.font, fontsize=self.font_size)
        # page y axis points down, so a negative angle turns the text counter-clockwise
        writer.write_text(page, morph=(center, fitz.Matrix(-self.rotation)))

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        doc = source.open_copy()
        try:
            total = len(doc)
            for done, page in enumerate(doc, start=1):
                self._stamp(page)
                report_progress(on_progress, done, total)
            data = doc.tobytes(**SAVE_OPTIONS)
        finally:
            doc.close()

        logger.info(f"Watermarked {total} pages of {source.name}")
        return ToolOutput.document(source.output_name(self.suffix), data)

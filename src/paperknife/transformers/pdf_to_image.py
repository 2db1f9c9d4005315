"""Export pages as images.

Every page is rendered at twice its point size and bundled into an archive
as ``<stem>-01.jpg``, ``<stem>-02.jpg`` and so on.
"""

import logging

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import InvalidOptionError
from paperknife.packaging.archive import ArchiveBundle
from paperknife.raster.producer import RasterFrameProducer
from paperknife.raster.quality import EXPORT_JPEG_QUALITY, EXPORT_SCALE, RenderPolicy
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

from .transformer import DocumentTransformer, ProgressCallback

logger = logging.getLogger(__name__)


def entry_name(stem: str, page_id: int, page_count: int, extension: str) -> str:
    """Archive entry name, zero-padded to at least two digits."""
    width = max(2, len(str(page_count)))
    return f"{stem}-{page_id:0{width}d}.{extension}"


class PdfToImageTransformer(DocumentTransformer):
    """Render every page to JPEG or PNG.

    Attributes:
        policy: Export scale, JPEG quality and format
    """

    suffix = "images"

    def __init__(self, image_format: str = "jpeg"):
        if image_format not in ("jpeg", "png"):
            raise InvalidOptionError(f"Unsupported image format: {image_format}")
        self.policy = RenderPolicy(
            scale=EXPORT_SCALE, quality=EXPORT_JPEG_QUALITY, image_format=image_format
        )

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        def forward(value: int) -> None:
            # rendering is the whole job here, not its first half
            if on_progress:
                on_progress(value * 2)

        outcome = RasterFrameProducer(self.policy).produce(source.handle, on_progress=forward)

        bundle = ArchiveBundle(f"{source.stem}-{self.suffix}.zip")
        for frame in outcome.frames:
            bundle.add(
                entry_name(source.stem, frame.page_id, source.page_count, frame.extension),
                frame.payload,
            )
        outcome.frames = []

        logger.info(f"Exported {len(bundle)} pages of {source.name}")
        return ToolOutput.archive(bundle.name, bundle.to_bytes(), warnings=outcome.warnings)

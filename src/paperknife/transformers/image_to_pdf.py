"""Images to PDF.

Each JPEG or PNG file becomes one page at its native pixel size. The files
are passed to the reconstruction context as-is, without re-encoding.
"""

import logging

from paperknife.config import get_settings
from paperknife.documents.handles import ImageSetHandle
from paperknife.exceptions import NoUsablePagesError
from paperknife.pipeline.progress import percent
from paperknife.reconstruction.client import CancellationToken, ReconstructionClient
from schemas.frame import RasterFrame
from schemas.messages import AssembleFramesRequest
from schemas.output import ToolOutput

from .transformer import ImageSetTransformer, ProgressCallback

logger = logging.getLogger(__name__)


def image_frame(handle: ImageSetHandle, page_id: int) -> RasterFrame:
    """Describe one image of a set as a full-page frame at its pixel size."""
    width, height = handle.page_size(page_id)
    return RasterFrame(
        page_id=page_id,
        width=int(width),
        height=int(height),
        page_width=width,
        page_height=height,
        scale=1.0,
        quality=1.0,
        image_format=handle.image_format(page_id),
        payload=handle.image_bytes(page_id),
    )


class ImageToPdfTransformer(ImageSetTransformer):
    """Build a PDF with one page per image.

    Attributes:
        file_name: Output file name (default from settings)
        client: Reconstruction client used to assemble the output
    """

    def __init__(
        self, file_name: str | None = None, client: ReconstructionClient | None = None
    ):
        self.file_name = file_name or f"{get_settings().output.default_base_name}.pdf"
        self.client = client or ReconstructionClient()

    def transform(
        self,
        images: list[bytes],
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        handle, warnings = ImageSetHandle.collect(images)
        if handle.page_count == 0:
            raise NoUsablePagesError(f"No usable images out of {len(images)}")

        def forward(fraction: float) -> None:
            if on_progress:
                on_progress(percent(fraction * 100))

        frames = [image_frame(handle, page_id) for page_id in range(1, handle.page_count + 1)]
        request = AssembleFramesRequest(frames=frames)
        frames = []
        result = self.client.run(request, on_progress=forward, cancel=cancel)
        logger.info(f"Built {self.file_name} from {handle.page_count} images")
        return ToolOutput.document(self.file_name, result.payload, warnings=warnings)

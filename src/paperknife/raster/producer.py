"""RasterFrame producer.

Renders document pages into encoded image frames, one page at a time.
Pages are strictly sequential: each pixmap is encoded and released before
the next page is rendered.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import fitz  # PyMuPDF

from paperknife.documents.handles import DocumentHandle
from paperknife.exceptions import NoUsablePagesError
from paperknife.pipeline.progress import raster_phase
from schemas.frame import RasterFrame

from .quality import RenderPolicy

logger = logging.getLogger(__name__)


def encode_pixmap(pix: fitz.Pixmap, policy: RenderPolicy) -> bytes:
    """Encode a pixmap as JPEG or PNG according to ``policy``."""
    if policy.image_format == "png":
        return pix.tobytes("png")
    return pix.tobytes("jpeg", jpg_quality=policy.jpeg_quality)


def render_frame(handle: DocumentHandle, page_id: int, policy: RenderPolicy) -> RasterFrame:
    """Render and encode a single page.

    Args:
        handle: Decoded document to render from
        page_id: 1-based page to render
        policy: Scale, quality and format to apply

    Returns:
        The encoded RasterFrame
    """
    page_width, page_height = handle.page_size(page_id)
    pix = handle.render(page_id, policy.scale, grayscale=policy.grayscale)
    width, height = pix.width, pix.height
    payload = encode_pixmap(pix, policy)
    pix = None  # release the surface before the next page

    return RasterFrame(
        page_id=page_id,
        width=width,
        height=height,
        page_width=page_width,
        page_height=page_height,
        scale=policy.scale,
        quality=policy.quality,
        image_format=policy.image_format,
        payload=payload,
    )


@dataclass
class RasterOutcome:
    """Frames produced for one document plus the pages that had to be skipped.

    Attributes:
        frames: Encoded frames in page order
        skipped: Page ids that could not be rendered
        warnings: One message per skipped page
    """

    frames: list[RasterFrame] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class RasterFrameProducer:
    """Produce RasterFrames for a sequence of pages under one render policy.

    Attributes:
        policy: Render scale, encode quality and format
    """

    def __init__(self, policy: RenderPolicy):
        self.policy = policy

    def produce(
        self,
        handle: DocumentHandle,
        page_ids: Sequence[int] | None = None,
        on_progress: Callable[[int], None] | None = None,
    ) -> RasterOutcome:
        """Rasterize pages in order.

        Progress is reported after every page as a percentage in the first
        half of the overall job (0-50).

        Args:
            handle: Decoded document to render from
            page_ids: Pages to render (default: every page in order)
            on_progress: Called with the overall percentage after each page

        Returns:
            RasterOutcome with the produced frames

        Raises:
            NoUsablePagesError: If no page could be rendered
        """
        if page_ids is None:
            page_ids = range(1, handle.page_count + 1)
        page_ids = list(page_ids)
        total = len(page_ids)
        outcome = RasterOutcome()

        for done, page_id in enumerate(page_ids, start=1):
            try:
                outcome.frames.append(render_frame(handle, page_id, self.policy))
            except Exception as e:
                message = f"Skipped unreadable page {page_id}: {e}"
                logger.warning(message)
                outcome.skipped.append(page_id)
                outcome.warnings.append(message)

            if on_progress:
                on_progress(raster_phase(done, total))

        if not outcome.frames:
            raise NoUsablePagesError(
                f"No usable pages out of {total}", skipped=outcome.skipped
            )

        logger.debug(
            f"Rasterized {len(outcome.frames)}/{total} pages at scale {self.policy.scale}"
        )
        return outcome

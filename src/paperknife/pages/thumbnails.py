"""Lazy, viewport-driven thumbnails.

Thumbnails are rendered only when their page comes within ``overscan``
positions of the visible window, and each page is rendered at most once.
"""

import logging
from collections.abc import Iterable, Sequence

from paperknife.documents.handles import DocumentHandle
from paperknife.raster.producer import render_frame
from paperknife.raster.quality import GRID_PRESET, RenderPolicy
from schemas.frame import RasterFrame

logger = logging.getLogger(__name__)


class ThumbnailCache:
    """Render-once cache of page thumbnails.

    Attributes:
        handle: Document the thumbnails are rendered from
        policy: Render preset (grid, page or preview)
        overscan: Extra positions rendered on each side of the visible window
        failed: Page ids that could not be rendered (not retried)
    """

    def __init__(
        self,
        handle: DocumentHandle,
        policy: RenderPolicy = GRID_PRESET,
        overscan: int = 4,
    ):
        self.handle = handle
        self.policy = policy
        self.overscan = overscan
        self.failed: set[int] = set()
        self._frames: dict[int, RasterFrame] = {}

    def __contains__(self, page_id: int) -> bool:
        return page_id in self._frames

    def __len__(self) -> int:
        return len(self._frames)

    def get(self, page_id: int) -> RasterFrame | None:
        return self._frames.get(page_id)

    def materialize(self, page_ids: Iterable[int]) -> list[RasterFrame]:
        """Render any of ``page_ids`` not rendered yet; return all available frames."""
        frames = []
        for page_id in page_ids:
            if page_id not in self._frames and page_id not in self.failed:
                try:
                    self._frames[page_id] = render_frame(self.handle, page_id, self.policy)
                except Exception as e:
                    logger.warning(f"Thumbnail for page {page_id} failed: {e}")
                    self.failed.add(page_id)
            if page_id in self._frames:
                frames.append(self._frames[page_id])
        return frames

    def visible(self, order: Sequence[int], first: int, last: int) -> list[RasterFrame]:
        """Materialize thumbnails for positions ``first..last`` of ``order``.

        Args:
            order: Current presentation order of page ids
            first: First visible position (0-based, inclusive)
            last: Last visible position (0-based, inclusive)

        Returns:
            Frames for the visible window plus its overscan margin
        """
        if not order or last < first:
            return []
        start = max(0, first - self.overscan)
        stop = min(len(order), last + 1 + self.overscan)
        return self.materialize(order[start:stop])

    def clear(self) -> None:
        self._frames.clear()
        self.failed.clear()

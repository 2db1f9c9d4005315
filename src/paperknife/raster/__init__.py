"""Page rasterization under a quality policy."""

from .producer import RasterFrameProducer, RasterOutcome, encode_pixmap, render_frame
from .quality import (
    GRAYSCALE_POLICY,
    GRID_PRESET,
    PAGE_PRESET,
    PREVIEW_PRESET,
    TIER_POLICIES,
    QualityTier,
    RenderPolicy,
)

__all__ = [
    "GRAYSCALE_POLICY",
    "GRID_PRESET",
    "PAGE_PRESET",
    "PREVIEW_PRESET",
    "TIER_POLICIES",
    "QualityTier",
    "RasterFrameProducer",
    "RasterOutcome",
    "RenderPolicy",
    "encode_pixmap",
    "render_frame",
]

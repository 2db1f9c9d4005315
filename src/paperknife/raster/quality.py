"""Quality tiers and render presets.

Scale is inverse to visual fidelity in the tier table: a smaller raster plus
a lower encode quality is what makes the output smaller, so tier names
describe the resulting file size, not the image resolution.
"""

from dataclasses import dataclass
from enum import Enum

from schemas.frame import ImageFormat


@dataclass(frozen=True)
class RenderPolicy:
    """How to rasterize and encode a page.

    Attributes:
        scale: Render scale (1.0 = 72 DPI)
        quality: Encode quality in [0, 1]
        image_format: Encoded image format
        grayscale: Render in a single gray channel
    """

    scale: float
    quality: float
    image_format: ImageFormat = "jpeg"
    grayscale: bool = False

    @property
    def jpeg_quality(self) -> int:
        """Encode quality on the 1-100 scale used by the JPEG encoder."""
        return max(1, min(100, round(self.quality * 100)))


class QualityTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def policy(self) -> RenderPolicy:
        return TIER_POLICIES[self]


TIER_POLICIES: dict[QualityTier, RenderPolicy] = {
    QualityTier.HIGH: RenderPolicy(scale=1.0, quality=0.30),
    QualityTier.MEDIUM: RenderPolicy(scale=1.5, quality=0.50),
    QualityTier.LOW: RenderPolicy(scale=2.0, quality=0.70),
}

GRAYSCALE_POLICY = RenderPolicy(scale=1.5, quality=0.75, grayscale=True)

# Thumbnails
GRID_PRESET = RenderPolicy(scale=0.5, quality=0.6)
PAGE_PRESET = RenderPolicy(scale=1.0, quality=0.9)
PREVIEW_PRESET = RenderPolicy(scale=1.5, quality=0.9)

# Page export
EXPORT_SCALE = 2.0
EXPORT_JPEG_QUALITY = 0.8

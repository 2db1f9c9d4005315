"""Grayscale conversion: the compression pipeline rendered in a single gray channel."""

from paperknife.config import get_settings
from paperknife.raster.quality import GRAYSCALE_POLICY, RenderPolicy

from .compress import RasterRebuildTransformer


class GrayscaleTransformer(RasterRebuildTransformer):
    suffix = "grayscale"
    tier = "grayscale"

    @property
    def policy(self) -> RenderPolicy:
        return GRAYSCALE_POLICY

    @property
    def archive_name(self) -> str:
        return get_settings().output.grayscale_archive_name

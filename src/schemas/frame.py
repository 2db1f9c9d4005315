"""Raster frame schema.

A RasterFrame is the rendered output of one page at one scale. Frames are
transient: they are produced while a job runs and discarded once the
reconstruction context has consumed them.
"""

from typing import Literal

from pydantic import BaseModel, Field

ImageFormat = Literal["jpeg", "png"]


class RasterFrame(BaseModel):
    """One rendered and encoded page.

    Attributes:
        page_id: 1-based page the frame was rendered from
        width: Pixel width of the encoded image
        height: Pixel height of the encoded image
        page_width: Width of the source page in points
        page_height: Height of the source page in points
        scale: Render scale applied to the page
        quality: Encode quality in [0, 1] (ignored for PNG)
        image_format: Encoded image format
        payload: Encoded image bytes
    """

    page_id: int = Field(ge=1)
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    page_width: float = Field(gt=0)
    page_height: float = Field(gt=0)
    scale: float = Field(gt=0)
    quality: float = Field(ge=0, le=1)
    image_format: ImageFormat = "jpeg"
    payload: bytes

    @property
    def size(self) -> int:
        return len(self.payload)

    @property
    def extension(self) -> str:
        return "jpg" if self.image_format == "jpeg" else "png"

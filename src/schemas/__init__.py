"""Schema definitions for paperknife."""

from .frame import ImageFormat, RasterFrame
from .job import ALLOWED_TRANSITIONS, JobStatus
from .messages import (
    CONTROL_ADAPTER,
    RESPONSE_ADAPTER,
    AssembleFramesRequest,
    BatchSuccessResponse,
    CancelRequest,
    EditPagesRequest,
    ErrorResponse,
    NamedPayload,
    ProgressResponse,
    SuccessResponse,
)
from .metadata import DocumentMetadata
from .output import MEDIA_TYPES, ToolOutput
from .page import PageDescriptor, PageInstruction

__all__ = [
    "ALLOWED_TRANSITIONS",
    "AssembleFramesRequest",
    "BatchSuccessResponse",
    "CONTROL_ADAPTER",
    "CancelRequest",
    "DocumentMetadata",
    "EditPagesRequest",
    "ErrorResponse",
    "ImageFormat",
    "JobStatus",
    "MEDIA_TYPES",
    "NamedPayload",
    "PageDescriptor",
    "PageInstruction",
    "ProgressResponse",
    "RESPONSE_ADAPTER",
    "RasterFrame",
    "SuccessResponse",
    "ToolOutput",
]

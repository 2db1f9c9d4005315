"""Reconstruction protocol messages.

Messages exchanged between the calling process and an isolated
reconstruction context. Every message carries a ``kind`` discriminator and
crosses the process boundary as a plain dict (``model_dump()``); the
receiving side validates it back with the adapters defined here.

Requests (caller -> context):
    assemble_frames: ordered raster frames to lay out one per page
    edit_pages: a source document plus an ordered page tree to copy
    cancel: stop the current request as soon as possible

Responses (context -> caller):
    progress: fractional completion in [0, 1]
    success: the finished document bytes (sent exactly once)
    success_batch: several named documents (sent exactly once)
    error: a human-readable failure reason
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from schemas.frame import RasterFrame
from schemas.page import PageInstruction


class AssembleFramesRequest(BaseModel):
    kind: Literal["assemble_frames"] = "assemble_frames"
    frames: list[RasterFrame]
    tier: str | None = None


class EditPagesRequest(BaseModel):
    """Copy pages of ``source`` in the given order, applying rotation deltas.

    In ``single`` mode one document is produced. In ``individual`` mode each
    page becomes its own document named ``{base_name}-page-{page_id}.pdf``.
    """

    kind: Literal["edit_pages"] = "edit_pages"
    source: bytes
    password: str | None = None
    pages: list[PageInstruction]
    mode: Literal["single", "individual"] = "single"
    base_name: str = "document"


class CancelRequest(BaseModel):
    kind: Literal["cancel"] = "cancel"


class ProgressResponse(BaseModel):
    kind: Literal["progress"] = "progress"
    fraction: float = Field(ge=0, le=1)


class SuccessResponse(BaseModel):
    kind: Literal["success"] = "success"
    payload: bytes


class NamedPayload(BaseModel):
    name: str
    payload: bytes


class BatchSuccessResponse(BaseModel):
    kind: Literal["success_batch"] = "success_batch"
    entries: list[NamedPayload]


class ErrorResponse(BaseModel):
    kind: Literal["error"] = "error"
    reason: str


ReconstructionRequest = Annotated[
    Union[AssembleFramesRequest, EditPagesRequest],
    Field(discriminator="kind"),
]

ControlMessage = Annotated[
    Union[AssembleFramesRequest, EditPagesRequest, CancelRequest],
    Field(discriminator="kind"),
]

ReconstructionResponse = Annotated[
    Union[ProgressResponse, SuccessResponse, BatchSuccessResponse, ErrorResponse],
    Field(discriminator="kind"),
]

CONTROL_ADAPTER: TypeAdapter = TypeAdapter(ControlMessage)
RESPONSE_ADAPTER: TypeAdapter = TypeAdapter(ReconstructionResponse)

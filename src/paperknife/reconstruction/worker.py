"""Isolated reconstruction context.

``run_context`` is the entry point of the child process started for every
reconstruction request. It receives exactly one request over its end of the
pipe, reports fractional progress while it works, answers with one success
or error message and exits. Between pages it checks the pipe for a cancel
message from the caller.
"""

import logging
from multiprocessing.connection import Connection

import fitz  # PyMuPDF
from pydantic import BaseModel

from paperknife.documents.source import open_pdf
from schemas.messages import (
    CONTROL_ADAPTER,
    AssembleFramesRequest,
    BatchSuccessResponse,
    CancelRequest,
    EditPagesRequest,
    ErrorResponse,
    NamedPayload,
    ProgressResponse,
    SuccessResponse,
)
from schemas.page import PageInstruction

logger = logging.getLogger(__name__)

SAVE_OPTIONS = {"garbage": 4, "deflate": True}


class CancelledByCaller(Exception):
    """Raised inside the context when the caller sent a cancel message."""

    pass


class ContextChannel:
    """Context-side end of the request/response/progress channel."""

    def __init__(self, conn: Connection):
        self.conn = conn

    def receive(self):
        return CONTROL_ADAPTER.validate_python(self.conn.recv())

    def send(self, message: BaseModel) -> None:
        self.conn.send(message.model_dump())

    def progress(self, fraction: float) -> None:
        self.send(ProgressResponse(fraction=max(0.0, min(1.0, fraction))))

    def check_cancelled(self) -> None:
        while self.conn.poll():
            message = self.receive()
            if isinstance(message, CancelRequest):
                raise CancelledByCaller()


def assemble_frames(request: AssembleFramesRequest, channel: ContextChannel) -> SuccessResponse:
    """Lay out each frame as a full page image, one page per frame.

    Each output page has the size of the source page the frame came from.
    Frames are released as soon as they are placed.
    """
    frames = request.frames
    request.frames = []
    total = len(frames)
    if total == 0:
        raise ValueError("No frames to assemble")

    frames.reverse()
    doc = fitz.open()
    try:
        done = 0
        while frames:
            channel.check_cancelled()
            frame = frames.pop()
            page = doc.new_page(width=frame.page_width, height=frame.page_height)
            page.insert_image(page.rect, stream=frame.payload)
            done += 1
            channel.progress(done / total)
        payload = doc.tobytes(**SAVE_OPTIONS)
    finally:
        doc.close()

    return SuccessResponse(payload=payload)


def _copy_page(out: fitz.Document, src: fitz.Document, instruction: PageInstruction) -> None:
    index = instruction.page_id - 1
    out.insert_pdf(src, from_page=index, to_page=index)
    if instruction.rotation:
        page = out[-1]
        page.set_rotation((page.rotation + instruction.rotation) % 360)


def edit_pages(
    request: EditPagesRequest, channel: ContextChannel
) -> SuccessResponse | BatchSuccessResponse:
    """Copy the requested page tree out of the source document."""
    if not request.pages:
        raise ValueError("No pages selected")

    src = open_pdf(request.source, request.password)
    try:
        for instruction in request.pages:
            if not 1 <= instruction.page_id <= len(src):
                raise ValueError(
                    f"Page {instruction.page_id} out of range (1-{len(src)})"
                )

        total = len(request.pages)
        if request.mode == "single":
            out = fitz.open()
            try:
                for done, instruction in enumerate(request.pages, start=1):
                    channel.check_cancelled()
                    _copy_page(out, src, instruction)
                    channel.progress(done / total)
                return SuccessResponse(payload=out.tobytes(**SAVE_OPTIONS))
            finally:
                out.close()

        entries = []
        for done, instruction in enumerate(request.pages, start=1):
            channel.check_cancelled()
            out = fitz.open()
            try:
                _copy_page(out, src, instruction)
                entries.append(
                    NamedPayload(
                        name=f"{request.base_name}-page-{instruction.page_id}.pdf",
                        payload=out.tobytes(**SAVE_OPTIONS),
                    )
                )
            finally:
                out.close()
            channel.progress(done / total)
        return BatchSuccessResponse(entries=entries)
    finally:
        src.close()


HANDLERS = {
    "assemble_frames": assemble_frames,
    "edit_pages": edit_pages,
}


def run_context(conn: Connection) -> None:
    """Child process entry point: serve one request, then exit."""
    channel = ContextChannel(conn)
    try:
        request = channel.receive()
        if isinstance(request, CancelRequest):
            raise CancelledByCaller()
        response = HANDLERS[request.kind](request, channel)
    except CancelledByCaller:
        response = ErrorResponse(reason="Cancelled by caller")
    except Exception as e:
        logger.error(f"Reconstruction failed: {e}")
        response = ErrorResponse(reason=str(e) or e.__class__.__name__)

    try:
        channel.send(response)
    except OSError:
        logger.debug("Caller closed the channel before the response was sent")
    finally:
        conn.close()

"""Caller side of the reconstruction protocol.

Every request runs in a fresh child process with no shared memory. The
caller sends the request, then waits for progress and a single terminal
message. Cancellation and the timeout both tear the child down; a child that
fails to start, exits silently or closes the pipe is treated as an error.
"""

import logging
import multiprocessing
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from multiprocessing.connection import Connection

from pydantic import ValidationError

from paperknife.config import ReconstructionConfig, get_settings
from paperknife.exceptions import (
    ReconstructionCancelled,
    ReconstructionCrashed,
    ReconstructionFailed,
    ReconstructionTimeout,
)
from schemas.messages import (
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

from .worker import run_context

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe flag a caller sets to abort an in-flight request."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class ReconstructionResult:
    """Successful response: one document, or several named documents.

    Attributes:
        payload: Document bytes for a single-document response
        entries: Named documents for a batch response
    """

    payload: bytes | None = None
    entries: list[NamedPayload] = field(default_factory=list)

    @property
    def is_batch(self) -> bool:
        return self.payload is None


class ReconstructionClient:
    """Dispatch reconstruction requests to isolated child processes.

    Attributes:
        config: Start method, timeout, poll interval and cancel grace period
        target: Child process entry point
    """

    def __init__(
        self,
        config: ReconstructionConfig | None = None,
        target: Callable[[Connection], None] = run_context,
    ):
        self.config = config or get_settings().reconstruction
        self.target = target

    def run(
        self,
        request: AssembleFramesRequest | EditPagesRequest,
        on_progress: Callable[[float], None] | None = None,
        cancel: CancellationToken | None = None,
    ) -> ReconstructionResult:
        """Run one request to completion.

        For frame requests, ownership of the frames passes to the context:
        ``request.frames`` is emptied once the request has been sent.

        Args:
            request: The request to serve
            on_progress: Called with each fractional progress value in [0, 1]
            cancel: Optional token checked while waiting

        Returns:
            ReconstructionResult with the finished bytes

        Raises:
            ReconstructionFailed: The context reported an error
            ReconstructionCrashed: The context could not start or died
            ReconstructionTimeout: The context exceeded the configured timeout
            ReconstructionCancelled: ``cancel`` was set
        """
        ctx = multiprocessing.get_context(self.config.start_method)
        parent_conn, child_conn = ctx.Pipe(duplex=True)
        process = ctx.Process(
            target=self.target,
            args=(child_conn,),
            name=f"reconstruction-{request.kind}",
            daemon=True,
        )

        try:
            process.start()
        except Exception as e:
            parent_conn.close()
            child_conn.close()
            raise ReconstructionCrashed(
                f"Failed to start reconstruction context: {e}"
            ) from e
        child_conn.close()

        logger.debug(f"Started {process.name} (pid {process.pid})")
        try:
            self._dispatch(parent_conn, request, process)
            return self._await_result(process, parent_conn, on_progress, cancel)
        finally:
            self._teardown(process, parent_conn)

    def _dispatch(
        self,
        conn: Connection,
        request: AssembleFramesRequest | EditPagesRequest,
        process: multiprocessing.process.BaseProcess,
    ) -> None:
        try:
            conn.send(request.model_dump())
        except OSError as e:
            raise ReconstructionCrashed(
                f"Reconstruction context is not accepting requests: {e}",
                exitcode=process.exitcode,
            ) from e
        if isinstance(request, AssembleFramesRequest):
            request.frames.clear()

    def _await_result(
        self,
        process: multiprocessing.process.BaseProcess,
        conn: Connection,
        on_progress: Callable[[float], None] | None,
        cancel: CancellationToken | None,
    ) -> ReconstructionResult:
        timeout = self.config.timeout_sec
        deadline = time.monotonic() + timeout if timeout else None

        while True:
            if cancel is not None and cancel.cancelled:
                self._request_cancel(process, conn)
                raise ReconstructionCancelled()

            if deadline is not None and time.monotonic() > deadline:
                logger.error(f"{process.name} did not finish within {timeout}s")
                raise ReconstructionTimeout(
                    f"Reconstruction timed out after {timeout}s", timeout=timeout
                )

            if conn.poll(self.config.poll_interval_sec):
                try:
                    raw = conn.recv()
                except (EOFError, OSError) as e:
                    process.join(self.config.cancel_grace_sec)
                    raise ReconstructionCrashed(
                        "Reconstruction context closed the channel without a result",
                        exitcode=process.exitcode,
                    ) from e

                try:
                    message = RESPONSE_ADAPTER.validate_python(raw)
                except ValidationError as e:
                    raise ReconstructionFailed(f"Malformed response: {e}") from e

                if isinstance(message, ProgressResponse):
                    if on_progress:
                        on_progress(message.fraction)
                elif isinstance(message, SuccessResponse):
                    return ReconstructionResult(payload=message.payload)
                elif isinstance(message, BatchSuccessResponse):
                    return ReconstructionResult(entries=message.entries)
                elif isinstance(message, ErrorResponse):
                    raise ReconstructionFailed(message.reason)

            elif not process.is_alive() and not conn.poll(0):
                raise ReconstructionCrashed(
                    f"Reconstruction context exited unexpectedly "
                    f"(exit code {process.exitcode})",
                    exitcode=process.exitcode,
                )

    def _request_cancel(
        self, process: multiprocessing.process.BaseProcess, conn: Connection
    ) -> None:
        logger.info(f"Cancelling {process.name}")
        try:
            conn.send(CancelRequest().model_dump())
        except OSError:
            return
        process.join(self.config.cancel_grace_sec)

    def _teardown(
        self, process: multiprocessing.process.BaseProcess, conn: Connection
    ) -> None:
        conn.close()
        process.join(self.config.cancel_grace_sec)
        if process.is_alive():
            logger.warning(f"Terminating {process.name} (pid {process.pid})")
            process.terminate()
            process.join(self.config.cancel_grace_sec)
        if process.is_alive():
            process.kill()
            process.join()
        process.close()

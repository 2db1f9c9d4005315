"""Per-file processing jobs."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import JobStateError
from schemas.job import ALLOWED_TRANSITIONS, JobStatus

logger = logging.getLogger(__name__)


@dataclass
class ProcessingJob:
    """One input file moving through ``pending -> processing -> completed | error``.

    A job whose bytes could not be loaded has no ``source`` and starts out
    in the error state.

    Attributes:
        name: Original file name
        source: Opened document, or None if loading failed
        job_id: Unique identifier
        status: Current lifecycle state
        result: Output bytes once completed
        output_name: File name for the output
        error: Failure reason once in the error state
        log: Timestamped processing history
    """

    name: str
    source: SourceDocument | None = None
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: JobStatus = JobStatus.PENDING
    result: bytes | None = None
    output_name: str | None = None
    error: str | None = None
    log: list[dict] = field(default_factory=list)

    @property
    def result_size(self) -> int:
        return len(self.result) if self.result is not None else 0

    @property
    def is_locked(self) -> bool:
        return self.source is not None and self.source.is_locked

    def _transition(self, target: JobStatus) -> None:
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise JobStateError(
                f"Job {self.name} cannot move from {self.status.value} to {target.value}"
            )
        self.status = target

    def mark_processing(self) -> None:
        self._transition(JobStatus.PROCESSING)
        self.write_log("Processing started", level="INFO", stage="processing")

    def mark_completed(self, result: bytes, output_name: str) -> None:
        self._transition(JobStatus.COMPLETED)
        self.result = result
        self.output_name = output_name
        self.write_log(
            f"Completed {output_name} ({len(result)} bytes)", level="INFO", stage="completed"
        )

    def mark_failed(self, reason: str) -> None:
        self._transition(JobStatus.ERROR)
        self.error = reason
        self.result = None
        self.write_log(reason, level="ERROR", stage="error")

    def write_log(
        self, message: str, level: str | None = None, stage: str | None = None
    ) -> None:
        """Add an entry to the job's processing history.

        Args:
            message: Log message describing the event
            level: Log level (e.g., 'INFO', 'ERROR', 'WARNING')
            stage: Lifecycle stage where the event occurred
        """
        entry: dict = {"timestamp": str(datetime.now(timezone.utc)), "message": message}
        if stage:
            entry["stage"] = stage
        if level:
            entry["level"] = level
        self.log.append(entry)

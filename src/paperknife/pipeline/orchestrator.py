"""Batch orchestration.

Runs every pending job of a session through one document transformer,
strictly one job at a time. A failing job is recorded and the batch moves
on. When more than one job completes, the outputs are bundled into a single
archive; exactly one completed job is delivered as-is.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from paperknife.exceptions import ArchiveError
from paperknife.packaging.archive import ArchiveBundle, ArchivePackager
from schemas.job import JobStatus
from schemas.output import ToolOutput

from .job import ProcessingJob
from .progress import ProgressTracker, batch_phase
from .session import BatchSession

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one orchestrator run.

    Attributes:
        output: The delivered document or archive, or None if nothing completed
        completed: Jobs that completed in this run
        failed: Jobs that failed in this run
        archive_error: Reason the archive could not be built, if it failed
        cancelled: Whether the run stopped early on cancellation
    """

    output: ToolOutput | None = None
    completed: list[ProcessingJob] = field(default_factory=list)
    failed: list[ProcessingJob] = field(default_factory=list)
    archive_error: str | None = None
    cancelled: bool = False


class BatchOrchestrator:
    """Drive a session's pending jobs through a transformer.

    The transformer must provide ``transform(source, on_progress=None,
    cancel=None) -> ToolOutput``, reporting overall job progress in 0-100.

    Attributes:
        transformer: Per-document tool
        packager: Builds the archive when several jobs complete
        archive_name: File name of the archive output
    """

    def __init__(
        self,
        transformer,
        archive_name: str,
        packager: ArchivePackager | None = None,
    ):
        self.transformer = transformer
        self.archive_name = archive_name
        self.packager = packager or ArchivePackager()

    def run(
        self,
        session: BatchSession,
        on_progress: Callable[[int], None] | None = None,
        on_job_update: Callable[[ProcessingJob], None] | None = None,
        cancel=None,
    ) -> BatchResult:
        """Process every pending, unlocked job of ``session``.

        With one job, progress follows the job closely (rasterization then
        reconstruction). With several, progress advances once per finished
        job. Jobs not yet started when ``cancel`` is set stay pending.

        Args:
            session: Jobs to run; its ``progress`` is kept up to date
            on_progress: Called with each new overall percentage
            on_job_update: Called whenever a job changes state
            cancel: Optional CancellationToken

        Returns:
            BatchResult with the delivered output and per-job outcomes
        """
        jobs = session.pending_jobs
        result = BatchResult()
        if not jobs:
            logger.info("No pending jobs to process")
            return result

        def report(value: int) -> None:
            session.progress = value
            if on_progress:
                on_progress(value)

        tracker = ProgressTracker(report)
        total = len(jobs)
        multi = total > 1

        for finished, job in enumerate(jobs, start=1):
            if cancel is not None and cancel.cancelled:
                logger.info(f"Batch cancelled with {total - finished + 1} jobs not started")
                result.cancelled = True
                break

            job_progress = None if multi else tracker.update
            self._run_job(job, job_progress, on_job_update, cancel)

            if multi:
                tracker.update(batch_phase(finished, total))

        result.completed = [job for job in jobs if job.status is JobStatus.COMPLETED]
        result.failed = [job for job in jobs if job.status is JobStatus.ERROR]
        if not multi and result.completed:
            tracker.complete()

        logger.info(
            f"Batch finished: {len(result.completed)} completed, {len(result.failed)} failed"
        )
        self._deliver(result)
        return result

    def _run_job(
        self,
        job: ProcessingJob,
        on_progress: Callable[[int], None] | None,
        on_job_update: Callable[[ProcessingJob], None] | None,
        cancel,
    ) -> None:
        job.mark_processing()
        if on_job_update:
            on_job_update(job)

        try:
            output = self.transformer.transform(
                job.source, on_progress=on_progress, cancel=cancel
            )
        except Exception as e:
            reason = getattr(e, "message", None) or str(e) or e.__class__.__name__
            logger.error(f"Failed to process {job.name}: {reason}")
            job.mark_failed(reason)
        else:
            for warning in output.warnings:
                job.write_log(warning, level="WARNING", stage="processing")
            job.mark_completed(output.data, output.file_name)

        if on_job_update:
            on_job_update(job)

    def _deliver(self, result: BatchResult) -> None:
        completed = result.completed
        if not completed:
            return

        if len(completed) == 1:
            job = completed[0]
            result.output = ToolOutput.document(job.output_name, job.result)
            return

        bundle = ArchiveBundle(self.archive_name)
        for job in completed:
            bundle.add(job.output_name, job.result)
        try:
            result.output = ToolOutput.archive(self.archive_name, bundle.to_bytes(self.packager))
        except ArchiveError as e:
            logger.error(e.message)
            result.archive_error = e.message

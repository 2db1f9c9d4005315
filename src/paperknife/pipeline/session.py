"""Batch sessions: the set of files a tool run works on."""

import logging

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import DocumentLoadError, IncorrectPasswordError
from schemas.job import JobStatus

from .job import ProcessingJob

logger = logging.getLogger(__name__)


class BatchSession:
    """Jobs added by the caller plus the batch's overall progress.

    Attributes:
        jobs: Jobs in the order files were added
        progress: Overall percentage in [0, 100]
    """

    def __init__(self):
        self.jobs: list[ProcessingJob] = []
        self.progress = 0

    def __len__(self) -> int:
        return len(self.jobs)

    @property
    def is_multi(self) -> bool:
        return len(self.jobs) > 1

    def add_file(self, name: str, data: bytes, password: str | None = None) -> ProcessingJob:
        """Open a file and add a pending job for it.

        A file that cannot be read becomes a job in the error state. A file
        that needs a password is added locked and is skipped by runs until
        ``unlock`` succeeds; a wrong ``password`` leaves it locked.
        """
        try:
            source = SourceDocument.open(name, data)
        except DocumentLoadError as e:
            logger.warning(e.message)
            job = ProcessingJob(name=name)
            job.mark_failed(e.message)
            self.jobs.append(job)
            return job

        job = ProcessingJob(name=name, source=source)
        if source.is_locked and password is not None:
            try:
                source.unlock(password)
            except IncorrectPasswordError:
                job.write_log("Incorrect password", level="WARNING", stage="pending")
        elif source.is_locked:
            job.write_log("Password required", level="WARNING", stage="pending")
        self.jobs.append(job)
        return job

    def get(self, job_id: str) -> ProcessingJob:
        for job in self.jobs:
            if job.job_id == job_id:
                return job
        raise KeyError(job_id)

    def unlock(self, job_id: str, password: str) -> ProcessingJob:
        """Unlock a locked job's document.

        Raises:
            KeyError: If no job has ``job_id``
            IncorrectPasswordError: If the password is wrong; the job stays locked
        """
        job = self.get(job_id)
        if job.source is not None:
            job.source.unlock(password)
            job.write_log("Unlocked", level="INFO", stage="pending")
        return job

    @property
    def locked_jobs(self) -> list[ProcessingJob]:
        return [job for job in self.jobs if job.is_locked]

    @property
    def pending_jobs(self) -> list[ProcessingJob]:
        """Jobs a run will process: pending and unlocked."""
        return [
            job
            for job in self.jobs
            if job.status is JobStatus.PENDING and job.source is not None and not job.is_locked
        ]

    @property
    def completed_jobs(self) -> list[ProcessingJob]:
        return [job for job in self.jobs if job.status is JobStatus.COMPLETED]

    @property
    def failed_jobs(self) -> list[ProcessingJob]:
        return [job for job in self.jobs if job.status is JobStatus.ERROR]

    def reset(self) -> None:
        """Close every document and start over with an empty session."""
        for job in self.jobs:
            if job.source is not None:
                job.source.close()
        self.jobs = []
        self.progress = 0

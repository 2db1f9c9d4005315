"""Batch processing: jobs, sessions, progress and orchestration."""

from .job import ProcessingJob
from .orchestrator import BatchOrchestrator, BatchResult
from .progress import ProgressTracker, batch_phase, raster_phase, reconstruction_phase
from .session import BatchSession

__all__ = [
    "BatchOrchestrator",
    "BatchResult",
    "BatchSession",
    "ProcessingJob",
    "ProgressTracker",
    "batch_phase",
    "raster_phase",
    "reconstruction_phase",
]

"""Reconstruction of output documents in an isolated process."""

from .client import CancellationToken, ReconstructionClient, ReconstructionResult
from .worker import run_context

__all__ = [
    "CancellationToken",
    "ReconstructionClient",
    "ReconstructionResult",
    "run_context",
]

"""Base classes for transformers.

Transformers are the engine's tools. Each one takes decoded input and
returns a ToolOutput. There are three types:

- DocumentTransformer: One source document in, one output out (e.g.,
  CompressTransformer). These can be batched by the BatchOrchestrator.
- MultiDocumentTransformer: Several source documents in, one output out
  (e.g., MergeTransformer)
- ImageSetTransformer: Raw image files in, one document out
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from paperknife.documents.source import SourceDocument
from paperknife.pipeline.progress import percent
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

ProgressCallback = Callable[[int], None]

SAVE_OPTIONS = {"garbage": 3, "deflate": True}


def report_progress(on_progress: ProgressCallback | None, done: int, total: int) -> None:
    """Report ``done`` of ``total`` steps as a percentage."""
    if on_progress and total > 0:
        on_progress(percent(done / total * 100))


class DocumentTransformer(ABC):
    """Abstract base class for single-document tools.

    Attributes:
        suffix: Appended to the source stem to name the output
    """

    suffix: str = "output"

    @abstractmethod
    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        """Transform one document.

        Args:
            source: Unlocked source document
            on_progress: Called with the overall percentage (0-100)
            cancel: Optional token to abort a long-running tool

        Returns:
            ToolOutput with the produced bytes
        """
        pass


class MultiDocumentTransformer(ABC):
    """Abstract base class for tools that combine several documents."""

    @abstractmethod
    def transform(
        self,
        sources: list[SourceDocument],
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        pass


class ImageSetTransformer(ABC):
    """Abstract base class for tools that build a document from image files."""

    @abstractmethod
    def transform(
        self,
        images: list[bytes],
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        pass

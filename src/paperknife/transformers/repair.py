"""Repair: reload a document and write it back out clean."""

import logging

from paperknife.documents.source import SourceDocument
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

from .transformer import DocumentTransformer, ProgressCallback

logger = logging.getLogger(__name__)


class RepairTransformer(DocumentTransformer):
    """Rebuild the cross-reference table and drop unused objects.

    The PDF engine reconstructs a damaged file while loading it; saving with
    garbage collection and content cleaning writes a consistent copy.
    """

    suffix = "repaired"

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        warnings = []
        doc = source.open_copy()
        try:
            if doc.is_repaired:
                warnings.append(f"Structural errors in {source.name} were repaired")
                logger.warning(warnings[-1])
            data = doc.tobytes(garbage=4, deflate=True, clean=True)
        finally:
            doc.close()

        if on_progress:
            on_progress(100)
        return ToolOutput.document(source.output_name(self.suffix), data, warnings=warnings)

"""Merge several documents into one, in the given order."""

import logging

import fitz  # PyMuPDF

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import InvalidOptionError
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

from .transformer import SAVE_OPTIONS, MultiDocumentTransformer, ProgressCallback, report_progress

logger = logging.getLogger(__name__)


class MergeTransformer(MultiDocumentTransformer):
    """Concatenate every page of every source.

    Attributes:
        file_name: Output file name
    """

    def __init__(self, file_name: str = "merged.pdf"):
        self.file_name = file_name

    def transform(
        self,
        sources: list[SourceDocument],
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        if len(sources) < 2:
            raise InvalidOptionError("Merging needs at least two documents")

        out = fitz.open()
        try:
            for done, source in enumerate(sources, start=1):
                doc = source.open_copy()
                try:
                    out.insert_pdf(doc)
                finally:
                    doc.close()
                logger.debug(f"Appended {source.name} ({source.page_count} pages)")
                report_progress(on_progress, done, len(sources))
            data = out.tobytes(**SAVE_OPTIONS)
            page_count = len(out)
        finally:
            out.close()

        logger.info(f"Merged {len(sources)} documents into {page_count} pages")
        return ToolOutput.document(self.file_name, data)

"""Plain-text extraction, page by page. No OCR: image-only pages come out empty."""

import logging

from paperknife.documents.source import SourceDocument
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

from .transformer import DocumentTransformer, ProgressCallback, report_progress

logger = logging.getLogger(__name__)


class PdfToTextTransformer(DocumentTransformer):
    suffix = "text"

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        blocks = []
        doc = source.open_copy()
        try:
            total = len(doc)
            for page_number, page in enumerate(doc, start=1):
                try:
                    text = page.get_text("text").strip()
                except Exception as e:
                    logger.warning(f"Could not extract text from page {page_number}: {e}")
                    text = ""
                blocks.append(f"--- Page {page_number} ---\n{text}\n")
                report_progress(on_progress, page_number, total)
        finally:
            doc.close()

        return ToolOutput.text(f"{source.stem}.txt", "\n".join(blocks))

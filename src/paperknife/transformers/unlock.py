"""Remove password protection."""

import logging

import fitz  # PyMuPDF

from paperknife.documents.source import SourceDocument
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

from .transformer import DocumentTransformer, ProgressCallback

logger = logging.getLogger(__name__)


class UnlockTransformer(DocumentTransformer):
    """Save a copy of a protected document without encryption.

    Attributes:
        password: Used to unlock the source if it is still locked
    """

    suffix = "unlocked"

    def __init__(self, password: str | None = None):
        self.password = password

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        if source.is_locked and self.password is not None:
            source.unlock(self.password)

        warnings = []
        doc = source.open_copy()
        try:
            if not doc.metadata.get("encryption"):
                warnings.append(f"{source.name} was not password protected")
            data = doc.tobytes(garbage=3, deflate=True, encryption=fitz.PDF_ENCRYPT_NONE)
        finally:
            doc.close()

        if on_progress:
            on_progress(100)
        logger.info(f"Decrypted {source.name}")
        return ToolOutput.document(source.output_name(self.suffix), data, warnings=warnings)

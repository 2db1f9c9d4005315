"""Password protection with AES-256."""

import logging

import fitz  # PyMuPDF

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import InvalidOptionError
from paperknife.reconstruction.client import CancellationToken
from schemas.output import ToolOutput

from .transformer import DocumentTransformer, ProgressCallback

logger = logging.getLogger(__name__)

PERMISSIONS = (
    fitz.PDF_PERM_ACCESSIBILITY
    | fitz.PDF_PERM_PRINT
    | fitz.PDF_PERM_PRINT_HQ
    | fitz.PDF_PERM_COPY
    | fitz.PDF_PERM_ANNOTATE
)


class ProtectTransformer(DocumentTransformer):
    """Encrypt a document so it needs a password to open."""

    suffix = "protected"

    def __init__(self, password: str, confirm: str):
        if not password:
            raise InvalidOptionError("Password must not be empty")
        if password != confirm:
            raise InvalidOptionError("Passwords do not match")
        self.password = password

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        doc = source.open_copy()
        try:
            data = doc.tobytes(
                garbage=3,
                deflate=True,
                encryption=fitz.PDF_ENCRYPT_AES_256,
                owner_pw=self.password,
                user_pw=self.password,
                permissions=PERMISSIONS,
            )
        finally:
            doc.close()

        if on_progress:
            on_progress(100)
        logger.info(f"Encrypted {source.name}")
        return ToolOutput.document(source.output_name(self.suffix), data)

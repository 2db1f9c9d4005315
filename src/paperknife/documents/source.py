"""Source documents: opened input files with their lock state."""

import logging
import re

import fitz  # PyMuPDF

from paperknife.exceptions import (
    DocumentLoadError,
    DocumentLockedError,
    IncorrectPasswordError,
)

from .handles import PdfHandle

logger = logging.getLogger(__name__)

PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)


def open_pdf(data: bytes, password: str | None = None, name: str = "document") -> fitz.Document:
    """Open PDF bytes with PyMuPDF, authenticating when a password is given.

    Raises:
        DocumentLoadError: If the bytes are not a readable PDF
        IncorrectPasswordError: If the password does not open the document
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise DocumentLoadError(f"Failed to read {name}: {e}") from e

    if doc.needs_pass and password is not None:
        if not doc.authenticate(password):
            doc.close()
            raise IncorrectPasswordError(f"Incorrect password for {name}")
    return doc


class SourceDocument:
    """An opened, decoded input document owned by one tool session.

    A document that needs a password stays locked (page count 0, no handle)
    until ``unlock`` succeeds.

    Attributes:
        name: Original file name
        data: Raw file bytes
        password: Credential that unlocked the document, if any
    """

    def __init__(self, name: str, data: bytes, doc: fitz.Document):
        self.name = name
        self.data = data
        self.password: str | None = None
        self._doc = doc
        self._locked = bool(doc.needs_pass)
        self._handle: PdfHandle | None = None if self._locked else PdfHandle(doc)

    def __repr__(self) -> str:
        state = "locked" if self.is_locked else f"{self.page_count} pages"
        return f"SourceDocument({self.name!r}, {state})"

    @classmethod
    def open(cls, name: str, data: bytes, password: str | None = None) -> "SourceDocument":
        """Open and probe a document.

        Args:
            name: File name used for logging and output naming
            data: PDF bytes
            password: Optional decryption credential

        Returns:
            The opened document; locked if it needs a password none was given for

        Raises:
            DocumentLoadError: If the bytes are not a readable PDF
            IncorrectPasswordError: If ``password`` is given and wrong
        """
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DocumentLoadError(f"Failed to read {name}: {e}") from e

        source = cls(name, data, doc)
        if source.is_locked:
            logger.debug(f"{name} is password protected")
            if password is not None:
                try:
                    source.unlock(password)
                except IncorrectPasswordError:
                    source.close()
                    raise
        return source

    @property
    def is_locked(self) -> bool:
        return self._locked

    @property
    def page_count(self) -> int:
        return 0 if self._locked else len(self._doc)

    @property
    def handle(self) -> PdfHandle:
        if self._handle is None:
            raise DocumentLockedError(f"{self.name} is password protected")
        return self._handle

    @property
    def stem(self) -> str:
        return PDF_SUFFIX.sub("", self.name)

    def output_name(self, suffix: str) -> str:
        """Derive an output file name, e.g. ``report.pdf`` -> ``report-compressed.pdf``."""
        return f"{self.stem}-{suffix}.pdf"

    def unlock(self, password: str) -> None:
        """Authenticate a locked document.

        Raises:
            IncorrectPasswordError: If the password is wrong; the document stays locked
        """
        if not self._locked:
            return
        if not self._doc.authenticate(password):
            logger.warning(f"Incorrect password for {self.name}")
            raise IncorrectPasswordError(f"Incorrect password for {self.name}")
        self._locked = False
        self.password = password
        self._handle = PdfHandle(self._doc)
        logger.info(f"Unlocked {self.name} ({self.page_count} pages)")

    def open_copy(self) -> fitz.Document:
        """Open a fresh, authenticated document from the raw bytes for editing."""
        if self._locked:
            raise DocumentLockedError(f"{self.name} is password protected")
        return open_pdf(self.data, self.password, self.name)

    def close(self) -> None:
        if not self._doc.is_closed:
            self._doc.close()

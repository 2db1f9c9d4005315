"""Document information dictionary schema."""

from pydantic import BaseModel


class DocumentMetadata(BaseModel):
    """Editable document information fields.

    Attributes:
        title: Document title
        author: Author name
        subject: Subject line
        keywords: Comma-separated keywords
        creator: Application that created the original content
        producer: Application that produced the PDF
    """

    title: str = ""
    author: str = ""
    subject: str = ""
    keywords: str = ""
    creator: str = ""
    producer: str = ""

    @property
    def keyword_list(self) -> list[str]:
        return [k.strip() for k in self.keywords.split(",") if k.strip()]

    @classmethod
    def from_pdf_info(cls, info: dict | None) -> "DocumentMetadata":
        """Build from a PyMuPDF ``Document.metadata`` dict (values may be None)."""
        info = info or {}
        return cls(
            title=info.get("title") or "",
            author=info.get("author") or "",
            subject=info.get("subject") or "",
            keywords=info.get("keywords") or "",
            creator=info.get("creator") or "",
            producer=info.get("producer") or "",
        )

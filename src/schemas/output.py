"""Tool output schema.

Every transformer returns a ToolOutput: the bytes it produced plus enough
description for a caller to name, label and deliver them.
"""

from typing import Literal

from pydantic import BaseModel, Field

OutputKind = Literal["document", "archive", "text"]

MEDIA_TYPES: dict[str, str] = {
    "document": "application/pdf",
    "archive": "application/zip",
    "text": "text/plain",
}


class ToolOutput(BaseModel):
    """Result of a single tool run or of a whole batch.

    Attributes:
        kind: What the bytes are ("document", "archive" or "text")
        file_name: Suggested file name for delivery
        data: Output bytes
        warnings: Non-fatal problems recorded while producing the output
    """

    kind: OutputKind
    file_name: str
    data: bytes
    warnings: list[str] = Field(default_factory=list)

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self.kind]

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def document(
        cls, file_name: str, data: bytes, warnings: list[str] | None = None
    ) -> "ToolOutput":
        return cls(kind="document", file_name=file_name, data=data, warnings=warnings or [])

    @classmethod
    def archive(
        cls, file_name: str, data: bytes, warnings: list[str] | None = None
    ) -> "ToolOutput":
        return cls(kind="archive", file_name=file_name, data=data, warnings=warnings or [])

    @classmethod
    def text(cls, file_name: str, content: str) -> "ToolOutput":
        return cls(kind="text", file_name=file_name, data=content.encode("utf-8"))

"""Page domain objects."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PageDescriptor:
    """Identifies one page of a source document.

    Attributes:
        page_id: 1-based index of the page in the original document order
    """

    page_id: int

    def __post_init__(self) -> None:
        if self.page_id < 1:
            raise ValueError(f"page_id must be >= 1, got {self.page_id}")

    @property
    def index(self) -> int:
        """0-based index used by the PDF engine."""
        return self.page_id - 1


@dataclass(frozen=True)
class PageInstruction:
    """One entry of an edited page tree: which page, and how much to turn it.

    Attributes:
        page_id: 1-based page in the source document
        rotation: Clockwise rotation delta in degrees (multiple of 90)
    """

    page_id: int
    rotation: int = 0

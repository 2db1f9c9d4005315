"""Rotate: add a clockwise rotation to some or all pages."""

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import InvalidOptionError
from paperknife.pages.collection import PageCollection
from paperknife.pages.ranges import parse_range_expression
from paperknife.reconstruction.client import ReconstructionClient
from schemas.page import PageInstruction

from .page_edit import PageEditTransformer


class RotateTransformer(PageEditTransformer):
    """Rotate pages by a multiple of 90 degrees.

    Rotation deltas add to each page's existing rotation. With a prepared
    collection, its own rotation deltas are used as they are.

    Attributes:
        degrees: Clockwise rotation delta
        range_expression: Pages to rotate (default: all)
    """

    suffix = "rotated"

    def __init__(
        self,
        degrees: int = 90,
        range_expression: str | None = None,
        collection: PageCollection | None = None,
        client: ReconstructionClient | None = None,
    ):
        super().__init__(collection, client)
        if degrees % 90:
            raise InvalidOptionError(f"Rotation must be a multiple of 90, got {degrees}")
        self.degrees = degrees
        self.range_expression = range_expression

    def instructions(self, source: SourceDocument) -> list[PageInstruction]:
        if self.collection is not None:
            return self.collection_for(source).instructions()

        collection = PageCollection(source.page_count)
        if self.range_expression is None:
            collection.rotate_all(self.degrees)
        else:
            parsed = parse_range_expression(self.range_expression, source.page_count)
            if not parsed.pages:
                raise InvalidOptionError(f"No valid pages in {self.range_expression!r}")
            for page_id in parsed.pages:
                collection.rotate(page_id, self.degrees)
        return collection.instructions()

"""Rearrange: rebuild a document with its pages in a new order."""

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import InvalidOptionError
from paperknife.pages.collection import PageCollection
from paperknife.reconstruction.client import ReconstructionClient
from schemas.page import PageInstruction

from .page_edit import PageEditTransformer


class RearrangeTransformer(PageEditTransformer):
    """Write every page in the collection's order.

    Attributes:
        order: New order as 1-based page ids; must name every page exactly once
    """

    suffix = "rearranged"

    def __init__(
        self,
        order: list[int] | None = None,
        collection: PageCollection | None = None,
        client: ReconstructionClient | None = None,
    ):
        super().__init__(collection, client)
        self.order = order

    def instructions(self, source: SourceDocument) -> list[PageInstruction]:
        collection = self.collection_for(source)
        if self.order is not None:
            if sorted(self.order) != list(range(1, source.page_count + 1)):
                raise InvalidOptionError(
                    f"Order must list each of pages 1-{source.page_count} exactly once"
                )
            for position, page_id in enumerate(self.order):
                collection.move(collection.order.index(page_id), position)
        return collection.instructions()

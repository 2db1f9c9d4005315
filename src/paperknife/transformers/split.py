"""Split: extract the selected pages into one document or one document per page."""

import logging
from typing import Literal

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import InvalidOptionError
from paperknife.pages.collection import PageCollection
from paperknife.reconstruction.client import ReconstructionClient
from schemas.page import PageInstruction

from .page_edit import PageEditTransformer

logger = logging.getLogger(__name__)


class SplitTransformer(PageEditTransformer):
    """Extract selected pages, in presentation order.

    Attributes:
        range_expression: Pages to select, e.g. "1-3,5" (default: current selection)
        mode: "single" or "individual"
    """

    suffix = "split"

    def __init__(
        self,
        range_expression: str | None = None,
        mode: Literal["single", "individual"] = "single",
        collection: PageCollection | None = None,
        client: ReconstructionClient | None = None,
    ):
        super().__init__(collection, client)
        if mode not in ("single", "individual"):
            raise InvalidOptionError(f"Unknown split mode: {mode}")
        self.range_expression = range_expression
        self.mode = mode

    def instructions(self, source: SourceDocument) -> list[PageInstruction]:
        collection = self.collection_for(source)
        if self.range_expression is not None:
            parsed = collection.parse_range_expression(self.range_expression)
            if parsed.all_dropped or not parsed.pages:
                raise InvalidOptionError(
                    f"No valid pages in {self.range_expression!r} "
                    f"(document has {source.page_count} pages)"
                )
            if parsed.dropped:
                logger.warning(f"Ignored page ranges: {', '.join(parsed.dropped)}")
        return collection.instructions(selected_only=True)

"""Page-tree editing through the reconstruction context.

Split, rearrange and rotate all reduce to the same request: copy a list of
source pages, in a given order, each with a rotation delta. The tools only
differ in how they derive that list from a PageCollection.
"""

import logging
from abc import abstractmethod
from typing import Literal

from paperknife.documents.source import SourceDocument
from paperknife.exceptions import InvalidOptionError
from paperknife.packaging.archive import ArchiveBundle
from paperknife.pages.collection import PageCollection
from paperknife.pipeline.progress import percent
from paperknife.reconstruction.client import CancellationToken, ReconstructionClient
from schemas.messages import EditPagesRequest
from schemas.output import ToolOutput
from schemas.page import PageInstruction

from .transformer import DocumentTransformer, ProgressCallback

logger = logging.getLogger(__name__)


class PageEditTransformer(DocumentTransformer):
    """Base class for tools that rebuild a document from an edited page tree.

    Attributes:
        collection: Optional prepared collection (e.g., from an interactive session)
        mode: "single" for one document, "individual" for one document per page
        client: Reconstruction client used to copy the pages
    """

    mode: Literal["single", "individual"] = "single"

    def __init__(
        self,
        collection: PageCollection | None = None,
        client: ReconstructionClient | None = None,
    ):
        self.collection = collection
        self.client = client or ReconstructionClient()

    def collection_for(self, source: SourceDocument) -> PageCollection:
        """Return the prepared collection, or a fresh one for ``source``."""
        if self.collection is None:
            return PageCollection(source.page_count)
        if self.collection.page_count != source.page_count:
            raise InvalidOptionError(
                f"Page collection has {self.collection.page_count} pages, "
                f"{source.name} has {source.page_count}"
            )
        return self.collection

    @abstractmethod
    def instructions(self, source: SourceDocument) -> list[PageInstruction]:
        pass

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        pages = self.instructions(source)
        if not pages:
            raise InvalidOptionError("No pages selected")

        request = EditPagesRequest(
            source=source.data,
            password=source.password,
            pages=pages,
            mode=self.mode,
            base_name=source.stem,
        )

        def forward(fraction: float) -> None:
            if on_progress:
                on_progress(percent(fraction * 100))

        result = self.client.run(request, on_progress=forward, cancel=cancel)

        if result.is_batch:
            bundle = ArchiveBundle(f"{source.stem}-{self.suffix}.zip")
            for entry in result.entries:
                bundle.add(entry.name, entry.payload)
            output = ToolOutput.archive(bundle.name, bundle.to_bytes())
        else:
            output = ToolOutput.document(source.output_name(self.suffix), result.payload)

        if self.collection is not None:
            self.collection.result = output
        logger.info(f"Wrote {output.file_name} ({len(pages)} pages)")
        return output

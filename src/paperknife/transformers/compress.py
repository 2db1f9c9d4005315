"""Compression by rasterization.

Every page is rendered to a JPEG under the chosen quality tier, then the
isolated reconstruction context lays the frames out as a new document with
the original page sizes. Text and vector content become images.
"""

import logging
from abc import abstractmethod

from paperknife.config import get_settings
from paperknife.documents.source import SourceDocument
from paperknife.pipeline.progress import reconstruction_phase
from paperknife.raster.producer import RasterFrameProducer
from paperknife.raster.quality import QualityTier, RenderPolicy
from paperknife.reconstruction.client import CancellationToken, ReconstructionClient
from schemas.messages import AssembleFramesRequest
from schemas.output import ToolOutput

from .transformer import DocumentTransformer, ProgressCallback

logger = logging.getLogger(__name__)


class RasterRebuildTransformer(DocumentTransformer):
    """Rasterize every page, then rebuild the document from the frames.

    Progress: rasterization reports 0-50, reconstruction 50-100.

    Attributes:
        client: Reconstruction client used to assemble the output
    """

    tier: str | None = None

    def __init__(self, client: ReconstructionClient | None = None):
        self.client = client or ReconstructionClient()

    @property
    @abstractmethod
    def policy(self) -> RenderPolicy:
        pass

    @property
    @abstractmethod
    def archive_name(self) -> str:
        pass

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        logger.info(f"Rasterizing {source.name} ({source.page_count} pages)")
        outcome = RasterFrameProducer(self.policy).produce(
            source.handle, on_progress=on_progress
        )

        request = AssembleFramesRequest(frames=outcome.frames, tier=self.tier)
        outcome.frames = []

        def forward(fraction: float) -> None:
            if on_progress:
                on_progress(reconstruction_phase(fraction))

        result = self.client.run(request, on_progress=forward, cancel=cancel)
        output = ToolOutput.document(
            source.output_name(self.suffix), result.payload, warnings=outcome.warnings
        )
        logger.info(
            f"Rebuilt {source.name}: {len(source.data)} -> {output.size} bytes"
        )
        return output


class CompressTransformer(RasterRebuildTransformer):
    """Shrink a document by re-encoding its pages under a quality tier.

    Attributes:
        quality_tier: high, medium or low (default from settings)
    """

    suffix = "compressed"

    def __init__(
        self,
        tier: QualityTier | str | None = None,
        client: ReconstructionClient | None = None,
    ):
        super().__init__(client)
        self.quality_tier = QualityTier(tier or get_settings().default_tier)
        self.tier = self.quality_tier.value

    @property
    def policy(self) -> RenderPolicy:
        return self.quality_tier.policy

    @property
    def archive_name(self) -> str:
        return get_settings().output.compressed_archive_name

"""Page collection: the ordered, selectable, rotatable view over a document.

Shared by the reorder, split, extract and rotate tools. Positions passed to
``move`` are indices into the *current* order; every other operation takes
original 1-based page ids. Any mutation invalidates the last produced result.
"""

import logging
from collections.abc import Iterator

from schemas.output import ToolOutput
from schemas.page import PageDescriptor, PageInstruction

from .ranges import RangeParseResult, format_range_expression, parse_range_expression

logger = logging.getLogger(__name__)


class PageCollection:
    """Ordered sequence of page ids plus a selected set and rotation deltas.

    Attributes:
        page_count: Number of pages in the source document
        order: Current presentation order (a permutation of 1..page_count)
        selected: Selected page ids
        rotations: Clockwise rotation delta per page id, in degrees
        result: Last output produced from this collection, cleared on change
        revision: Incremented on every mutation
    """

    def __init__(self, page_count: int):
        if page_count < 0:
            raise ValueError(f"page_count must be >= 0, got {page_count}")
        self.page_count = page_count
        self.revision = 0
        self.initialize()

    def __repr__(self) -> str:
        return (
            f"PageCollection(pages={self.page_count}, "
            f"selected={len(self.selected)}, revision={self.revision})"
        )

    def __len__(self) -> int:
        return len(self.order)

    def __iter__(self) -> Iterator[int]:
        return iter(self.order)

    def initialize(self) -> None:
        """Identity order, every page selected, no rotations."""
        self.order: list[int] = list(range(1, self.page_count + 1))
        self.selected: set[int] = set(self.order)
        self.rotations: dict[int, int] = {}
        self.result: ToolOutput | None = None

    def reset(self) -> None:
        self.initialize()
        self.revision += 1

    def contains(self, page_id: int) -> bool:
        return 1 <= page_id <= self.page_count

    def _invalidate(self) -> None:
        self.revision += 1
        if self.result is not None:
            logger.debug(f"Discarding stale result {self.result.file_name}")
        self.result = None

    def toggle(self, page_id: int) -> None:
        """Flip selection of ``page_id``; out-of-range ids are ignored."""
        if not self.contains(page_id):
            return
        if page_id in self.selected:
            self.selected.remove(page_id)
        else:
            self.selected.add(page_id)
        self._invalidate()

    def select_all(self) -> None:
        self.selected = set(self.order)
        self._invalidate()

    def clear_selection(self) -> None:
        self.selected = set()
        self._invalidate()

    def move(self, from_index: int, to_index: int) -> None:
        """Move the element at ``from_index`` to ``to_index`` in the current order.

        Out-of-bounds indices are ignored.
        """
        size = len(self.order)
        if not (0 <= from_index < size and 0 <= to_index < size):
            return
        if from_index == to_index:
            return
        page_id = self.order.pop(from_index)
        self.order.insert(to_index, page_id)
        self._invalidate()

    def parse_range_expression(self, text: str) -> RangeParseResult:
        """Replace the selection with the pages named by ``text``.

        Returns:
            RangeParseResult; check ``all_dropped`` to warn the user
        """
        result = parse_range_expression(text, self.page_count)
        self.selected = set(result.pages)
        if result.dropped:
            logger.debug(f"Ignored range tokens: {result.dropped}")
        self._invalidate()
        return result

    @property
    def range_expression(self) -> str:
        return format_range_expression(self.selected)

    def rotate(self, page_id: int, degrees: int = 90) -> None:
        """Add a clockwise rotation to one page; out-of-range ids are ignored."""
        if not self.contains(page_id):
            return
        if degrees % 90:
            raise ValueError(f"Rotation must be a multiple of 90, got {degrees}")
        self.rotations[page_id] = (self.rotations.get(page_id, 0) + degrees) % 360
        self._invalidate()

    def rotate_all(self, degrees: int = 90) -> None:
        if degrees % 90:
            raise ValueError(f"Rotation must be a multiple of 90, got {degrees}")
        for page_id in self.order:
            self.rotations[page_id] = (self.rotations.get(page_id, 0) + degrees) % 360
        self._invalidate()

    def selected_in_order(self) -> list[int]:
        """Selected page ids in presentation order."""
        return [page_id for page_id in self.order if page_id in self.selected]

    def descriptors(self) -> list[PageDescriptor]:
        return [PageDescriptor(page_id) for page_id in self.order]

    def instructions(self, selected_only: bool = False) -> list[PageInstruction]:
        """Page tree for the reconstruction context, in presentation order."""
        page_ids = self.selected_in_order() if selected_only else self.order
        return [
            PageInstruction(page_id=page_id, rotation=self.rotations.get(page_id, 0))
            for page_id in page_ids
        ]

    def is_permutation(self) -> bool:
        return sorted(self.order) == list(range(1, self.page_count + 1))

"""Page collections, range expressions and thumbnails."""

from .collection import PageCollection
from .ranges import RangeParseResult, format_range_expression, parse_range_expression
from .thumbnails import ThumbnailCache

__all__ = [
    "PageCollection",
    "RangeParseResult",
    "ThumbnailCache",
    "format_range_expression",
    "parse_range_expression",
]

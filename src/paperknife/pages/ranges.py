"""Page-range expressions.

Grammar: ``entry (',' entry)*`` where ``entry := number | number '-' number``.
Whitespace around tokens is ignored. Parsing is lenient: malformed tokens,
inverted ranges and single numbers outside the document are dropped rather
than rejected, and reported back so a caller can warn when nothing matched.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

NUMBER = re.compile(r"^\d+$")
RANGE = re.compile(r"^(\d+)\s*-\s*(\d+)$")


@dataclass
class RangeParseResult:
    """Outcome of parsing a page-range expression.

    Attributes:
        pages: Selected page ids, ascending and unique
        accepted: Tokens that contributed at least one page
        dropped: Tokens that were ignored
    """

    pages: list[int] = field(default_factory=list)
    accepted: list[str] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)

    @property
    def all_dropped(self) -> bool:
        """True when the expression had tokens but none of them selected anything."""
        return bool(self.dropped) and not self.accepted


def parse_range_expression(text: str, page_count: int) -> RangeParseResult:
    """Parse ``text`` against a document of ``page_count`` pages.

    Range bounds are clamped into [1, page_count]; a range that is empty
    after clamping (including ``a > b``) selects nothing.

    Examples:
        >>> parse_range_expression("1-3, 5, x", 10).pages
        [1, 2, 3, 5]
        >>> parse_range_expression("8-20", 10).pages
        [8, 9, 10]
    """
    pages: set[int] = set()
    result = RangeParseResult()

    for raw in text.split(","):
        token = raw.strip()
        if not token:
            continue

        if match := RANGE.match(token):
            start = max(1, int(match.group(1)))
            end = min(int(match.group(2)), page_count)
            if start > end:
                result.dropped.append(token)
                continue
            pages.update(range(start, end + 1))
            result.accepted.append(token)
        elif NUMBER.match(token):
            number = int(token)
            if 1 <= number <= page_count:
                pages.add(number)
                result.accepted.append(token)
            else:
                result.dropped.append(token)
        else:
            result.dropped.append(token)

    result.pages = sorted(pages)
    return result


def format_range_expression(pages: Iterable[int]) -> str:
    """Serialize page ids to the canonical expression, e.g. ``1-3,5``."""
    ordered = sorted(set(pages))
    if not ordered:
        return ""

    parts = []
    start = prev = ordered[0]
    for page in ordered[1:]:
        if page == prev + 1:
            prev = page
            continue
        parts.append(str(start) if start == prev else f"{start}-{prev}")
        start = prev = page
    parts.append(str(start) if start == prev else f"{start}-{prev}")
    return ",".join(parts)

"""Archive packaging.

Bundles several named outputs into one ZIP container. Entries keep their
order and names, and every entry carries the same fixed timestamp, so the
same inputs always produce the same bytes.
"""

import io
import logging
import zipfile
from collections.abc import Iterable

from paperknife.exceptions import ArchiveError

logger = logging.getLogger(__name__)

# Earliest timestamp the ZIP format can represent
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class ArchivePackager:
    """Build ZIP bytes from ``(name, data)`` entries."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self.compression = compression

    def package(self, entries: Iterable[tuple[str, bytes]]) -> bytes:
        """Write entries, in order, into an in-memory ZIP archive.

        Raises:
            ArchiveError: If the archive cannot be written
        """
        buffer = io.BytesIO()
        count = 0
        try:
            with zipfile.ZipFile(buffer, "w", compression=self.compression) as zf:
                for name, data in entries:
                    info = zipfile.ZipInfo(name, date_time=FIXED_DATE_TIME)
                    info.compress_type = self.compression
                    info.external_attr = 0o644 << 16
                    zf.writestr(info, data)
                    count += 1
        except Exception as e:
            raise ArchiveError(f"Failed to build archive: {e}") from e

        logger.debug(f"Packaged {count} entries ({buffer.tell()} bytes)")
        return buffer.getvalue()


class ArchiveBundle:
    """Ordered collection of named outputs, materialized to ZIP on demand.

    Attributes:
        name: File name of the archive
        entries: ``(name, data)`` pairs in insertion order
    """

    def __init__(self, name: str):
        self.name = name
        self.entries: list[tuple[str, bytes]] = []

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.entries]

    def add(self, name: str, data: bytes) -> None:
        self.entries.append((name, data))

    def to_bytes(self, packager: ArchivePackager | None = None) -> bytes:
        return (packager or ArchivePackager()).package(self.entries)

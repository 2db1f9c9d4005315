"""Output packaging."""

from .archive import ArchiveBundle, ArchivePackager

__all__ = ["ArchiveBundle", "ArchivePackager"]

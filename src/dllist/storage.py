"""Storage collaborator: persists compressed lists keyed by region/language."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .constants import Language, RegionMeta
from .packing.errors import CollaboratorError, E_WRITE_IO
from .utils.io import atomic_write_bytes

__all__ = ["ListStorage", "FileStorage", "LIST_FILENAME"]

LIST_FILENAME = "dllist.bin"


class ListStorage(Protocol):
    def path_for(self, region: RegionMeta, language: Language) -> Path: ...

    def write(
        self, region: RegionMeta, language: Language, data: bytes
    ) -> Path: ...


class FileStorage:
    """Writes ``<root>/<region>/<language>/dllist.bin`` (numeric codes)."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def path_for(self, region: RegionMeta, language: Language) -> Path:
        return (
            self.root
            / str(int(region.region))
            / str(int(language))
            / LIST_FILENAME
        )

    def write(self, region: RegionMeta, language: Language, data: bytes) -> Path:
        path = self.path_for(region, language)
        try:
            atomic_write_bytes(path, data)
        except OSError as exc:
            raise CollaboratorError(
                E_WRITE_IO,
                f"Cannot write {path}: {exc}",
                {"path": str(path)},
            ) from exc
        return path

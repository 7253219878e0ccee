"""Metadata collaborator: display strings merged into title records.

Providers are prepared once per process and then only read. A document
for :class:`StaticMetadataProvider` maps game ids to per-language text::

    RSBE01:
      english: {title: "Super Smash Bros. Brawl", short_title: "Brawl"}
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol

from ..constants import Language
from ..utils.io import load_document

__all__ = [
    "TitleMetadata",
    "MetadataProvider",
    "NullMetadataProvider",
    "StaticMetadataProvider",
    "load_metadata",
]


@dataclass(frozen=True, slots=True)
class TitleMetadata:
    title: Optional[str] = None
    subtitle: Optional[str] = None
    short_title: Optional[str] = None


class MetadataProvider(Protocol):
    def prepare(self) -> None: ...

    def lookup(
        self, game_id: str, language: Language
    ) -> Optional[TitleMetadata]: ...


class NullMetadataProvider:
    def prepare(self) -> None:
        pass

    def lookup(self, game_id: str, language: Language) -> Optional[TitleMetadata]:
        return None


class StaticMetadataProvider:
    def __init__(self, document: Mapping[str, Any]):
        self._document = dict(document)
        self._entries: Dict[tuple[str, str], TitleMetadata] = {}
        self._lock = threading.Lock()
        self._prepared = False

    def prepare(self) -> None:
        with self._lock:
            if self._prepared:
                return
            for game_id, per_language in self._document.items():
                if not isinstance(per_language, dict):
                    raise ValueError(f"Metadata for {game_id} must be a mapping")
                for lang, fields in per_language.items():
                    if not isinstance(fields, dict):
                        raise ValueError(
                            f"Metadata for {game_id}/{lang} must be a mapping"
                        )
                    self._entries[(str(game_id), str(lang).lower())] = TitleMetadata(
                        title=fields.get("title"),
                        subtitle=fields.get("subtitle"),
                        short_title=fields.get("short_title"),
                    )
            self._prepared = True

    def lookup(self, game_id: str, language: Language) -> Optional[TitleMetadata]:
        if not self._prepared:
            raise RuntimeError("Metadata provider used before prepare()")
        return self._entries.get((game_id, language.name.lower()))


def load_metadata(path: str | Path) -> StaticMetadataProvider:
    return StaticMetadataProvider(load_document(path))

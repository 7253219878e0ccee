"""Process-wide build context.

Holds the collaborators every build shares (catalog, metadata provider,
compressor, storage). :meth:`BuildContext.prepare` is the one-time
initialization that must finish before the orchestrator schedules any
build.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from .compression import Compressor
from .logging import get_logger
from .packing.errors import (
    CollaboratorError,
    DlListError,
    E_METADATA,
    E_QUERY,
)
from .sources.catalog import CatalogSource
from .sources.metadata import MetadataProvider, NullMetadataProvider
from .storage import ListStorage

__all__ = ["BuildContext"]


@dataclass
class BuildContext:
    catalog: CatalogSource
    compressor: Compressor
    storage: ListStorage
    metadata: MetadataProvider = field(default_factory=NullMetadataProvider)
    generate_titles: bool = True
    _prepared: bool = field(default=False, init=False, repr=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    @property
    def prepared(self) -> bool:
        return self._prepared

    def prepare(self) -> None:
        with self._lock:
            if self._prepared:
                return
            logger = get_logger()
            try:
                self.metadata.prepare()
            except DlListError:
                raise
            except Exception as exc:
                raise CollaboratorError(
                    E_METADATA, f"Metadata preparation failed: {exc}"
                ) from exc
            try:
                self.catalog.prepare()
            except DlListError:
                raise
            except Exception as exc:
                raise CollaboratorError(
                    E_QUERY, f"Catalog preparation failed: {exc}"
                ) from exc
            self._prepared = True
            logger.debug("Build context prepared")

    def close(self) -> None:
        self.catalog.close()

    def __enter__(self) -> "BuildContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

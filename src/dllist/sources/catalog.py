"""Catalog collaborator: the rows each download list is built from.

Builds only read from a catalog. Anything it needs process-wide (the
legacy play-time aggregation, for instance) happens once in
:meth:`CatalogSource.prepare`, before any build is scheduled.

:class:`StaticCatalogSource` serves rows from a JSON/YAML document::

    list_id: 3
    ratings:
      - {rating_id: 1, group: ESRB, age: 6, title: "E"}
    titles:
      - {id: 1, game_id: RSBE01, title_type: 1, company_id: 1,
         title: {english: "Brawl"}, release: [2008, 3, 9], new: true,
         regions: [NTSC]}
    recommendation_votes:
      - {game_id: RSBE01, votes: 12, medal: 2}

Rows may carry a ``regions`` list (region names) restricting them to those
regions; rows without one apply everywhere.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Protocol, Sequence

from ..constants import Language, RatingGroup, RegionMeta
from ..utils.io import load_document

__all__ = [
    "Row",
    "CatalogSource",
    "StaticCatalogSource",
    "load_catalog",
    "CATALOG_TABLES",
]

Row = Mapping[str, Any]

CATALOG_TABLES = (
    "ratings",
    "title_types",
    "companies",
    "titles",
    "videos",
    "demos",
    "recommendation_votes",
    "popular_videos",
    "detailed_ratings",
)


class CatalogSource(Protocol):
    def prepare(self) -> None: ...

    def close(self) -> None: ...

    def list_info(self, region: RegionMeta, language: Language) -> Row: ...

    def ratings(self, region: RegionMeta) -> Sequence[Row]: ...

    def title_types(self, region: RegionMeta) -> Sequence[Row]: ...

    def companies(self, region: RegionMeta) -> Sequence[Row]: ...

    def titles(self, region: RegionMeta) -> Sequence[Row]: ...

    def videos(self, region: RegionMeta) -> Sequence[Row]: ...

    def demos(self, region: RegionMeta) -> Sequence[Row]: ...

    def recommendation_votes(self, region: RegionMeta) -> Sequence[Row]: ...

    def popular_videos(self, region: RegionMeta) -> Sequence[Row]: ...

    def detailed_ratings(self, region: RegionMeta) -> Sequence[Row]: ...

    def rating_image(
        self, region: RegionMeta, rating_id: int
    ) -> bytes | None: ...


def _row_applies(row: Row, region: RegionMeta) -> bool:
    regions = row.get("regions")
    if not regions:
        return True
    names = {str(r).strip().upper() for r in regions}
    return region.region.name in names


def _rating_group_matches(row: Row, region: RegionMeta) -> bool:
    group = row.get("group")
    if group is None:
        return True
    if isinstance(group, str):
        return RatingGroup[group.strip().upper()] == region.rating_group
    return int(group) == int(region.rating_group)


class StaticCatalogSource:
    """Catalog backed by an in-memory document; read-only once prepared."""

    def __init__(self, document: Mapping[str, Any], base_dir: Path | None = None):
        self._document = dict(document)
        self._base_dir = base_dir or Path.cwd()
        self._tables: Dict[str, List[Row]] = {}
        self._images: Dict[int, bytes] = {}
        self._lock = threading.Lock()
        self._prepared = False

    def prepare(self) -> None:
        with self._lock:
            if self._prepared:
                return
            for name in CATALOG_TABLES:
                rows = self._document.get(name) or []
                if not isinstance(rows, list):
                    raise ValueError(f"Catalog table {name} must be a list")
                for i, row in enumerate(rows):
                    if not isinstance(row, dict):
                        raise ValueError(f"Catalog row {name}[{i}] must be a mapping")
                self._tables[name] = [dict(r) for r in rows]
            for rating in self._tables["ratings"]:
                image = rating.get("image")
                if image:
                    path = self._base_dir / str(image)
                    self._images[int(rating["rating_id"])] = path.read_bytes()
            self._prepared = True

    def close(self) -> None:
        self._images.clear()

    def _rows(self, name: str, region: RegionMeta) -> List[Row]:
        if not self._prepared:
            raise RuntimeError("Catalog used before prepare()")
        return [r for r in self._tables[name] if _row_applies(r, region)]

    def list_info(self, region: RegionMeta, language: Language) -> Row:
        return {
            "list_id": int(self._document.get("list_id", 0)),
            "thumbnail_id": int(self._document.get("thumbnail_id", 0)),
        }

    def ratings(self, region: RegionMeta) -> List[Row]:
        return [
            r
            for r in self._rows("ratings", region)
            if _rating_group_matches(r, region)
        ]

    def title_types(self, region: RegionMeta) -> List[Row]:
        return self._rows("title_types", region)

    def companies(self, region: RegionMeta) -> List[Row]:
        return self._rows("companies", region)

    def titles(self, region: RegionMeta) -> List[Row]:
        return self._rows("titles", region)

    def videos(self, region: RegionMeta) -> List[Row]:
        return self._rows("videos", region)

    def demos(self, region: RegionMeta) -> List[Row]:
        return self._rows("demos", region)

    def recommendation_votes(self, region: RegionMeta) -> List[Row]:
        return self._rows("recommendation_votes", region)

    def popular_videos(self, region: RegionMeta) -> List[Row]:
        return self._rows("popular_videos", region)

    def detailed_ratings(self, region: RegionMeta) -> List[Row]:
        return [
            r
            for r in self._rows("detailed_ratings", region)
            if _rating_group_matches(r, region)
        ]

    def rating_image(self, region: RegionMeta, rating_id: int) -> bytes | None:
        return self._images.get(int(rating_id))


def load_catalog(path: str | Path) -> StaticCatalogSource:
    p = Path(path)
    return StaticCatalogSource(load_document(p), base_dir=p.parent)

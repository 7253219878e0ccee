"""In-memory download list for one (region, language) build.

A :class:`ListAggregate` is created by a single build task, populated
table by table in canonical order, finalized by the header protocol and
then discarded. It is never shared between tasks.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..constants import Language, RegionMeta
from ..packing.constants import TABLE_ORDER
from ..packing.errors import ProtocolError, E_TABLE_ORDER
from ..packing.header import Header
from ..packing.serializer import serialize

__all__ = ["TitleRecommendation", "ListAggregate"]


@dataclass(slots=True)
class TitleRecommendation:
    votes: int = 0
    medal: int = 0


class ListAggregate:
    def __init__(self, region: RegionMeta, language: Language):
        self.region = region
        self.language = language
        self.header = Header()
        self.ratings: List = []
        self.title_types: List = []
        self.companies: List = []
        self.titles: List = []
        # Absolute offsets of records in ``titles``, in display order.
        self.new_titles: List[int] = []
        self.videos: List = []
        self.new_videos: List = []
        self.demos: List = []
        self.recommendations: List[int] = []
        self.recent_recommendations: List = []
        self.popular_videos: List = []
        self.detailed_ratings: List = []

        # Build-time working state; not serialized.
        self.votes: Dict[str, TitleRecommendation] = {}
        self.company_offsets: Dict[int, int] = {}
        self.title_offsets: Dict[str, int] = {}
        self.new_title_candidates: List[tuple[str, tuple[int, int, int]]] = []
        self.image_buffer = io.BytesIO()

        self._populated: List[str] = []
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def populated(self) -> tuple[str, ...]:
        return tuple(self._populated)

    def table(self, name: str) -> List:
        if name not in TABLE_ORDER:
            raise KeyError(name)
        return getattr(self, name)

    def _check_writable(self) -> None:
        if self._sealed:
            raise ProtocolError(
                E_TABLE_ORDER,
                "List has been finalized and can no longer be modified",
            )

    def add_table(self, name: str, entries: Sequence) -> int:
        """Append ``name`` as the next table and record it in the header.

        Returns the table's absolute offset. Tables must arrive in
        :data:`TABLE_ORDER`; each may be added once.
        """
        self._check_writable()
        if name not in TABLE_ORDER:
            raise KeyError(name)
        position = TABLE_ORDER.index(name)
        if self._populated and TABLE_ORDER.index(self._populated[-1]) >= position:
            raise ProtocolError(
                E_TABLE_ORDER,
                f"Table {name} added after {self._populated[-1]}",
                {"table": name, "populated": list(self._populated)},
            )
        offset = self.current_size()
        entry = self.header.tables[name]
        entry.offset = offset
        entry.count = len(entries)
        self.table(name).extend(entries)
        self._populated.append(name)
        return offset

    def current_size(self) -> int:
        """Serialized size so far plus accumulated image bytes."""
        return len(serialize(self)) + self.image_buffer.tell()

    def write_image(self, data: bytes) -> int:
        self._check_writable()
        offset = self.current_size()
        self.image_buffer.write(data)
        return offset

    @property
    def image_data(self) -> bytes:
        return self.image_buffer.getvalue()

    def seal(self) -> None:
        self._sealed = True

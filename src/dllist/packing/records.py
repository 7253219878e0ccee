"""Fixed-size entity records written into the download list tables.

Each record class declares its big-endian layout as a tuple of
:class:`FieldSpec`; :meth:`Record.pack` emits exactly :meth:`Record.size`
bytes or raises :class:`EncodingError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List

from .fields import FieldSpec, layout_size, pack_fields
from .errors import internal_error

__all__ = [
    "Record",
    "RatingRecord",
    "TitleTypeRecord",
    "CompanyRecord",
    "TitleRecord",
    "VideoRecord",
    "NewVideoRecord",
    "DemoRecord",
    "RecentRecommendationRecord",
    "PopularVideoRecord",
    "DetailedRatingRecord",
]


def _reserved(length: int) -> FieldSpec:
    return FieldSpec(None, "bytes", length)


class Record:
    __slots__ = ()

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = ()

    @classmethod
    def size(cls) -> int:
        return layout_size(cls.LAYOUT)

    def pack(self) -> bytes:
        out = pack_fields(self, self.LAYOUT)
        if len(out) != self.size():  # pragma: no cover
            raise internal_error(
                f"{type(self).__name__} packed to {len(out)} bytes, expected {self.size()}"
            )
        return out


@dataclass(slots=True)
class RatingRecord(Record):
    rating_id: int
    rating_group: int
    age: int
    title: str = ""
    jpeg_offset: int = 0
    jpeg_size: int = 0

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = (
        FieldSpec("rating_id", "u8"),
        FieldSpec("rating_group", "u8"),
        FieldSpec("age", "u8"),
        _reserved(1),
        FieldSpec("jpeg_offset", "u32"),
        FieldSpec("jpeg_size", "u32"),
        FieldSpec("title", "utf16", 11),
    )


@dataclass(slots=True)
class TitleTypeRecord(Record):
    type_id: int
    console_model: str
    console_name: str
    group_id: int = 0

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = (
        FieldSpec("type_id", "u8"),
        FieldSpec("console_model", "bytes", 3),
        FieldSpec("console_name", "utf16", 51),
        FieldSpec("group_id", "u8"),
        _reserved(1),
    )


@dataclass(slots=True)
class CompanyRecord(Record):
    company_id: int
    developer: str
    publisher: str

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = (
        FieldSpec("company_id", "u32"),
        FieldSpec("developer", "utf16", 31),
        FieldSpec("publisher", "utf16", 31),
    )


@dataclass(slots=True)
class TitleRecord(Record):
    id: int
    title_id: str
    title_type: int
    genre: List[int] = field(default_factory=list)
    company_offset: int = 0
    release_year: int = 0
    release_month: int = 0
    release_day: int = 0
    rating_id: int = 0
    title: str = ""
    subtitle: str = ""
    short_title: str = ""

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = (
        FieldSpec("id", "u32"),
        FieldSpec("title_id", "bytes", 4),
        FieldSpec("title_type", "u8"),
        FieldSpec("genre", "bytes", 3),
        FieldSpec("company_offset", "u32"),
        FieldSpec("release_year", "u16"),
        FieldSpec("release_month", "u8"),
        FieldSpec("release_day", "u8"),
        FieldSpec("rating_id", "u8"),
        _reserved(29),
        FieldSpec("title", "utf16", 31),
        FieldSpec("subtitle", "utf16", 31),
        FieldSpec("short_title", "utf16", 31),
    )


@dataclass(slots=True)
class VideoRecord(Record):
    video_id: int
    length: int
    title_id: int
    rating_id: int = 0
    new_tag: int = 0
    video_index: int = 0
    title: str = ""

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = (
        FieldSpec("video_id", "u32"),
        FieldSpec("length", "u16"),
        FieldSpec("title_id", "u32"),
        _reserved(15),
        FieldSpec("rating_id", "u8"),
        FieldSpec("new_tag", "u8"),
        FieldSpec("video_index", "u8"),
        _reserved(2),
        FieldSpec("title", "utf16", 123),
    )


@dataclass(slots=True)
class NewVideoRecord(Record):
    video_id: int
    length: int
    title_id: int
    title: str = ""

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = (
        FieldSpec("video_id", "u32"),
        FieldSpec("length", "u16"),
        FieldSpec("title_id", "u32"),
        _reserved(18),
        FieldSpec("title", "utf16", 102),
    )


@dataclass(slots=True)
class DemoRecord(Record):
    demo_id: int
    title: str
    title_id: int
    subtitle: str = ""
    company_offset: int = 0
    removal_year: int = 0
    removal_month: int = 0
    removal_day: int = 0
    rating_id: int = 0
    new_tag: int = 0
    new_tag_index: int = 0

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = (
        FieldSpec("demo_id", "u32"),
        FieldSpec("title", "utf16", 31),
        FieldSpec("subtitle", "utf16", 31),
        FieldSpec("title_id", "u32"),
        FieldSpec("company_offset", "u32"),
        FieldSpec("removal_year", "u16"),
        FieldSpec("removal_month", "u8"),
        FieldSpec("removal_day", "u8"),
        _reserved(4),
        FieldSpec("rating_id", "u8"),
        FieldSpec("new_tag", "u8"),
        FieldSpec("new_tag_index", "u8"),
        _reserved(205),
    )


@dataclass(slots=True)
class RecentRecommendationRecord(Record):
    title_offset: int
    medal: int = 0

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = (
        FieldSpec("title_offset", "u32"),
        FieldSpec("medal", "u8"),
        _reserved(1),
    )


@dataclass(slots=True)
class PopularVideoRecord(Record):
    video_id: int
    length: int
    title_id: int
    rank: int
    bar_color: int = 0
    rating_id: int = 0
    title: str = ""

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = (
        FieldSpec("video_id", "u32"),
        FieldSpec("length", "u16"),
        FieldSpec("title_id", "u32"),
        FieldSpec("bar_color", "u8"),
        _reserved(15),
        FieldSpec("rating_id", "u8"),
        _reserved(1),
        FieldSpec("rank", "u8"),
        _reserved(1),
        FieldSpec("title", "utf16", 102),
    )


@dataclass(slots=True)
class DetailedRatingRecord(Record):
    rating_group: int
    rating_id: int
    title: str = ""

    LAYOUT: ClassVar[tuple[FieldSpec, ...]] = (
        FieldSpec("rating_group", "u8"),
        FieldSpec("rating_id", "u8"),
        FieldSpec("title", "utf16", 102),
    )

"""Region, language and rating-group configuration.

The console service publishes one download list per (region, language)
pair. The set is fixed; builds only ever select a subset of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Sequence

__all__ = [
    "Region",
    "Language",
    "RatingGroup",
    "RegionMeta",
    "REGIONS",
    "region_by_name",
    "build_pairs",
]


class Region(IntEnum):
    JAPAN = 0
    NTSC = 1
    PAL = 2


class Language(IntEnum):
    JAPANESE = 0
    ENGLISH = 1
    GERMAN = 2
    FRENCH = 3
    SPANISH = 4
    ITALIAN = 5
    DUTCH = 6


class RatingGroup(IntEnum):
    CERO = 0
    ESRB = 1
    PEGI = 2


@dataclass(frozen=True, slots=True)
class RegionMeta:
    region: Region
    rating_group: RatingGroup
    country_code: int
    languages: tuple[Language, ...]


REGIONS: tuple[RegionMeta, ...] = (
    RegionMeta(Region.JAPAN, RatingGroup.CERO, 1, (Language.JAPANESE,)),
    RegionMeta(
        Region.NTSC,
        RatingGroup.ESRB,
        49,
        (Language.ENGLISH, Language.FRENCH, Language.SPANISH),
    ),
    RegionMeta(
        Region.PAL,
        RatingGroup.PEGI,
        110,
        (
            Language.ENGLISH,
            Language.GERMAN,
            Language.FRENCH,
            Language.SPANISH,
            Language.ITALIAN,
            Language.DUTCH,
        ),
    ),
)


def region_by_name(name: str) -> RegionMeta:
    key = name.strip().upper()
    for meta in REGIONS:
        if meta.region.name == key:
            return meta
    raise KeyError(name)


def build_pairs(
    regions: Iterable[RegionMeta] | None = None,
) -> list[tuple[RegionMeta, Language]]:
    """Expand region metadata into the (region, language) build pairs."""
    selected: Sequence[RegionMeta] = (
        tuple(regions) if regions is not None else REGIONS
    )
    pairs: list[tuple[RegionMeta, Language]] = []
    for meta in selected:
        for lang in meta.languages:
            if (meta, lang) not in pairs:
                pairs.append((meta, lang))
    return pairs

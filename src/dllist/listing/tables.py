"""Table construction steps.

Each ``make_*`` step turns catalog rows into records and appends them to
the aggregate as the next table. Steps run in the order fixed by
:data:`dllist.listing.builder.BUILD_SEQUENCE`; later steps read the
offsets earlier ones recorded (company offsets, title offsets).
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any, Iterable, List, Sequence

from ..logging import get_logger
from ..packing.constants import LIST_VERSION, MAX_RECOMMENDATIONS
from ..packing.records import (
    CompanyRecord,
    DemoRecord,
    DetailedRatingRecord,
    NewVideoRecord,
    PopularVideoRecord,
    RatingRecord,
    RecentRecommendationRecord,
    Record,
    TitleRecord,
    TitleTypeRecord,
    VideoRecord,
)
from ..utils.text import clip_text, localized
from .aggregate import ListAggregate, TitleRecommendation

if TYPE_CHECKING:  # pragma: no cover
    from ..context import BuildContext

__all__ = [
    "query_recommendations",
    "make_header",
    "make_ratings_table",
    "make_title_type_table",
    "make_companies_table",
    "make_title_table",
    "make_new_title_table",
    "make_video_table",
    "make_new_video_table",
    "make_demo_table",
    "make_recommendation_table",
    "make_recent_recommendation_table",
    "make_popular_video_table",
    "make_detailed_rating_table",
    "write_rating_images",
    "rank_recommendations",
]


def _width(record_type: type[Record], name: str) -> int:
    for spec in record_type.LAYOUT:
        if spec.name == name:
            return spec.length
    raise KeyError(name)


def _text(lst: ListAggregate, row: Any, key: str, record_type: type[Record]) -> str:
    value = localized(row.get(key), lst.language)
    return clip_text(value, _width(record_type, key))


def _date(value: Any) -> tuple[int, int, int]:
    if not value:
        return (0, 0, 0)
    # YAML loads unquoted ISO dates as datetime.date
    if isinstance(value, datetime.date):
        return value.year, value.month, value.day
    if isinstance(value, str):
        parts = [int(p) for p in value.split("-")]
    else:
        parts = [int(p) for p in value]
    parts = (parts + [0, 0, 0])[:3]
    return parts[0], parts[1], parts[2]


def _flag(row: Any, key: str) -> int:
    return 1 if row.get(key) else 0


def query_recommendations(lst: ListAggregate, ctx: "BuildContext") -> None:
    for row in ctx.catalog.recommendation_votes(lst.region):
        game_id = str(row["game_id"])
        rec = lst.votes.setdefault(game_id, TitleRecommendation())
        rec.votes += int(row.get("votes", 0))
        rec.medal = max(rec.medal, int(row.get("medal", 0)))


def make_header(lst: ListAggregate, ctx: "BuildContext") -> None:
    info = ctx.catalog.list_info(lst.region, lst.language)
    header = lst.header
    header.version = LIST_VERSION
    header.list_id = int(info.get("list_id", 0))
    header.thumbnail_id = int(info.get("thumbnail_id", 0))
    header.country_code = lst.region.country_code
    header.language_code = int(lst.language)


def make_ratings_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    records = [
        RatingRecord(
            rating_id=int(row["rating_id"]),
            rating_group=int(lst.region.rating_group),
            age=int(row.get("age", 0)),
            title=_text(lst, row, "title", RatingRecord),
        )
        for row in ctx.catalog.ratings(lst.region)
    ]
    lst.add_table("ratings", records)


def make_title_type_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    records = [
        TitleTypeRecord(
            type_id=int(row["type_id"]),
            console_model=str(row.get("console_model", "")),
            console_name=_text(lst, row, "console_name", TitleTypeRecord),
            group_id=int(row.get("group_id", 0)),
        )
        for row in ctx.catalog.title_types(lst.region)
    ]
    lst.add_table("title_types", records)


def make_companies_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    records = [
        CompanyRecord(
            company_id=int(row["company_id"]),
            developer=_text(lst, row, "developer", CompanyRecord),
            publisher=_text(lst, row, "publisher", CompanyRecord),
        )
        for row in ctx.catalog.companies(lst.region)
    ]
    offset = lst.add_table("companies", records)
    size = CompanyRecord.size()
    for i, rec in enumerate(records):
        lst.company_offsets[rec.company_id] = offset + i * size


def _company_offset(lst: ListAggregate, row: Any) -> int:
    company_id = row.get("company_id")
    if company_id is None:
        return 0
    offset = lst.company_offsets.get(int(company_id))
    if offset is None:
        get_logger().warning(
            "Unknown company %s referenced by %s",
            company_id,
            row.get("game_id") or row.get("demo_id"),
        )
        return 0
    return offset


def make_title_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    rows: Sequence[Any] = (
        ctx.catalog.titles(lst.region) if ctx.generate_titles else []
    )
    records: List[TitleRecord] = []
    game_ids: List[str] = []
    for row in rows:
        game_id = str(row["game_id"])
        year, month, day = _date(row.get("release"))
        rec = TitleRecord(
            id=int(row["id"]),
            title_id=game_id[:4],
            title_type=int(row.get("title_type", 0)),
            genre=[int(g) for g in row.get("genre", [])],
            company_offset=_company_offset(lst, row),
            release_year=year,
            release_month=month,
            release_day=day,
            rating_id=int(row.get("rating_id", 0)),
            title=_text(lst, row, "title", TitleRecord),
            subtitle=_text(lst, row, "subtitle", TitleRecord),
            short_title=_text(lst, row, "short_title", TitleRecord),
        )
        meta = ctx.metadata.lookup(game_id, lst.language)
        if meta is not None:
            if meta.title:
                rec.title = clip_text(meta.title, _width(TitleRecord, "title"))
            if meta.subtitle:
                rec.subtitle = clip_text(
                    meta.subtitle, _width(TitleRecord, "subtitle")
                )
            if meta.short_title:
                rec.short_title = clip_text(
                    meta.short_title, _width(TitleRecord, "short_title")
                )
        records.append(rec)
        game_ids.append(game_id)
    offset = lst.add_table("titles", records)
    size = TitleRecord.size()
    for i, game_id in enumerate(game_ids):
        lst.title_offsets[game_id] = offset + i * size
    lst.new_title_candidates = [
        (game_id, _date(row.get("release")))
        for game_id, row in zip(game_ids, rows)
        if row.get("new")
    ]


def make_new_title_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    # Newest first; stable sort keeps title order among equal dates.
    ordered = sorted(
        lst.new_title_candidates, key=lambda c: c[1], reverse=True
    )
    lst.add_table(
        "new_titles", [lst.title_offsets[game_id] for game_id, _ in ordered]
    )


def make_video_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    records = [
        VideoRecord(
            video_id=int(row["video_id"]),
            length=int(row.get("length", 0)),
            title_id=int(row.get("title_id", 0)),
            rating_id=int(row.get("rating_id", 0)),
            new_tag=_flag(row, "new"),
            video_index=int(row.get("video_index", 0)),
            title=_text(lst, row, "title", VideoRecord),
        )
        for row in ctx.catalog.videos(lst.region)
    ]
    lst.add_table("videos", records)


def make_new_video_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    records = [
        NewVideoRecord(
            video_id=v.video_id,
            length=v.length,
            title_id=v.title_id,
            title=clip_text(v.title, _width(NewVideoRecord, "title")),
        )
        for v in lst.videos
        if v.new_tag
    ]
    lst.add_table("new_videos", records)


def make_demo_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    records = []
    for row in ctx.catalog.demos(lst.region):
        year, month, day = _date(row.get("removal"))
        records.append(
            DemoRecord(
                demo_id=int(row["demo_id"]),
                title=_text(lst, row, "title", DemoRecord),
                subtitle=_text(lst, row, "subtitle", DemoRecord),
                title_id=int(row.get("title_id", 0)),
                company_offset=_company_offset(lst, row),
                removal_year=year,
                removal_month=month,
                removal_day=day,
                rating_id=int(row.get("rating_id", 0)),
                new_tag=_flag(row, "new"),
                new_tag_index=int(row.get("new_tag_index", 0)),
            )
        )
    lst.add_table("demos", records)


def rank_recommendations(lst: ListAggregate) -> List[str]:
    """Game ids of the most-voted titles present in the title table.

    Ties keep title table order. At most ``MAX_RECOMMENDATIONS`` ids.
    """
    candidates = [
        (game_id, rec)
        for game_id, rec in lst.votes.items()
        if game_id in lst.title_offsets and rec.votes > 0
    ]
    candidates.sort(key=lambda c: (-c[1].votes, lst.title_offsets[c[0]]))
    return [game_id for game_id, _ in candidates[:MAX_RECOMMENDATIONS]]


def make_recommendation_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    ranked = rank_recommendations(lst)
    lst.add_table(
        "recommendations", [lst.title_offsets[game_id] for game_id in ranked]
    )


def make_recent_recommendation_table(
    lst: ListAggregate, ctx: "BuildContext"
) -> None:
    ranked = rank_recommendations(lst)
    records = [
        RecentRecommendationRecord(
            title_offset=lst.title_offsets[game_id],
            medal=lst.votes[game_id].medal,
        )
        for game_id in ranked
    ]
    lst.add_table("recent_recommendations", records)
    lst.votes.clear()


def make_popular_video_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    rows: Iterable[Any] = sorted(
        ctx.catalog.popular_videos(lst.region),
        key=lambda r: int(r.get("rank", 0)),
    )
    records = [
        PopularVideoRecord(
            video_id=int(row["video_id"]),
            length=int(row.get("length", 0)),
            title_id=int(row.get("title_id", 0)),
            rank=int(row.get("rank", 0)),
            bar_color=int(row.get("bar_color", 0)),
            rating_id=int(row.get("rating_id", 0)),
            title=_text(lst, row, "title", PopularVideoRecord),
        )
        for row in rows
    ]
    lst.add_table("popular_videos", records)


def make_detailed_rating_table(lst: ListAggregate, ctx: "BuildContext") -> None:
    records = [
        DetailedRatingRecord(
            rating_group=int(lst.region.rating_group),
            rating_id=int(row["rating_id"]),
            title=_text(lst, row, "title", DetailedRatingRecord),
        )
        for row in ctx.catalog.detailed_ratings(lst.region)
    ]
    lst.add_table("detailed_ratings", records)


def write_rating_images(lst: ListAggregate, ctx: "BuildContext") -> None:
    for rating in lst.ratings:
        data = ctx.catalog.rating_image(lst.region, rating.rating_id)
        if not data:
            continue
        rating.jpeg_offset = lst.write_image(data)
        rating.jpeg_size = len(data)

"""Per-task list build: populate, finalize, compress, store."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Sequence

from ..constants import Language, RegionMeta
from ..logging import get_logger
from ..packing.errors import CollaboratorError, DlListError, E_QUERY
from ..packing.protocol import finalize
from ..reporting import get_reporter
from . import tables
from .aggregate import ListAggregate

if TYPE_CHECKING:  # pragma: no cover
    from ..context import BuildContext

__all__ = ["Step", "BUILD_SEQUENCE", "ListBuilder", "BuildResult", "run_build"]

Step = Callable[[ListAggregate, "BuildContext"], None]

# Fixed population order. Title offsets must exist before the index
# tables are made, and the table steps follow TABLE_ORDER.
BUILD_SEQUENCE: tuple[tuple[str, Step], ...] = (
    ("query_recommendations", tables.query_recommendations),
    ("make_header", tables.make_header),
    ("make_ratings_table", tables.make_ratings_table),
    ("make_title_type_table", tables.make_title_type_table),
    ("make_companies_table", tables.make_companies_table),
    ("make_title_table", tables.make_title_table),
    ("make_new_title_table", tables.make_new_title_table),
    ("make_video_table", tables.make_video_table),
    ("make_new_video_table", tables.make_new_video_table),
    ("make_demo_table", tables.make_demo_table),
    ("make_recommendation_table", tables.make_recommendation_table),
    (
        "make_recent_recommendation_table",
        tables.make_recent_recommendation_table,
    ),
    ("make_popular_video_table", tables.make_popular_video_table),
    ("make_detailed_rating_table", tables.make_detailed_rating_table),
    ("write_rating_images", tables.write_rating_images),
)


@dataclass(slots=True)
class BuildResult:
    region: RegionMeta
    language: Language
    path: Path
    filesize: int
    checksum: int
    compressed_size: int


class ListBuilder:
    def __init__(
        self,
        ctx: "BuildContext",
        region: RegionMeta,
        language: Language,
        sequence: Sequence[tuple[str, Step]] = BUILD_SEQUENCE,
    ):
        self.ctx = ctx
        self.region = region
        self.language = language
        self.sequence = sequence

    def populate(self) -> ListAggregate:
        logger = get_logger()
        lst = ListAggregate(self.region, self.language)
        for name, step in self.sequence:
            try:
                step(lst, self.ctx)
            except DlListError:
                raise
            except Exception as exc:
                raise CollaboratorError(
                    E_QUERY,
                    f"{name} failed: {exc}",
                    {
                        "step": name,
                        "region": self.region.region.name,
                        "language": self.language.name,
                    },
                ) from exc
            logger.debug(
                "%s/%s: %s done", self.region.region.name, self.language.name, name
            )
        return lst


def run_build(
    ctx: "BuildContext", region: RegionMeta, language: Language
) -> BuildResult:
    rep = get_reporter()
    worker = {"region": int(region.region), "language": int(language)}
    rep.status(
        f"Starting worker - Region: {worker['region']}, Language: {worker['language']}",
        worker="start",
        **worker,
    )
    lst = ListBuilder(ctx, region, language).populate()
    final = finalize(lst)
    compressed = ctx.compressor.compress(final.payload)
    path = ctx.storage.write(region, language, compressed)
    rep.status(
        f"Finished worker - Region: {worker['region']}, Language: {worker['language']}",
        worker="finish",
        **worker,
    )
    rep.verbose(
        f"{path}: filesize={final.filesize} crc=0x{final.checksum:08x} compressed={len(compressed)}"
    )
    return BuildResult(
        region=region,
        language=language,
        path=path,
        filesize=final.filesize,
        checksum=final.checksum,
        compressed_size=len(compressed),
    )

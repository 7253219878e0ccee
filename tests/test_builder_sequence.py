import pytest

from catalog_helper import make_context, sample_catalog

from dllist.compression import IdentityCompressor
from dllist.constants import Language, REGIONS
from dllist.context import BuildContext
from dllist.listing.builder import BUILD_SEQUENCE, ListBuilder, run_build
from dllist.packing.constants import HEADER_SIZE, LIST_VERSION, TABLE_ORDER
from dllist.packing.errors import (
    CollaboratorError,
    E_ENCODE_RANGE,
    E_QUERY,
    EncodingError,
)
from dllist.packing.inspector import verify_list
from dllist.packing.serializer import serialize
from dllist.sources.catalog import load_catalog
from dllist.sources.metadata import StaticMetadataProvider
from dllist.storage import FileStorage

JAPAN, NTSC, PAL = REGIONS


def _populate(ctx, region=NTSC, language=Language.ENGLISH):
    ctx.prepare()
    return ListBuilder(ctx, region, language).populate()


def test_sequence_follows_table_order(tmp_path):
    names = [name for name, _ in BUILD_SEQUENCE]
    assert names[0] == "query_recommendations"
    assert names[1] == "make_header"
    assert names[-1] == "write_rating_images"
    lst = _populate(make_context(tmp_path))
    assert lst.populated == TABLE_ORDER


def test_header_fields(tmp_path):
    lst = _populate(make_context(tmp_path))
    assert lst.header.version == LIST_VERSION
    assert lst.header.list_id == 7
    assert lst.header.thumbnail_id == 2
    assert lst.header.country_code == 49
    assert lst.header.language_code == int(Language.ENGLISH)


def test_table_offsets_follow_running_size(tmp_path):
    lst = _populate(make_context(tmp_path))
    tables = lst.header.tables
    assert tables["ratings"].offset == HEADER_SIZE
    assert tables["ratings"].count == 2
    assert tables["title_types"].offset == HEADER_SIZE + 2 * 34
    assert tables["companies"].offset == HEADER_SIZE + 2 * 34 + 2 * 108
    assert tables["titles"].offset == 676
    assert tables["titles"].count == 3
    assert lst.title_offsets == {"RSBE01": 676, "RMCE01": 912, "RZDE01": 1148}
    assert lst.company_offsets[2] == tables["companies"].offset + 128
    assert lst.titles[0].company_offset == lst.company_offsets[2]


def test_new_titles_newest_first(tmp_path):
    lst = _populate(make_context(tmp_path))
    assert lst.new_titles == [912, 676]


def test_recommendations_ranked_by_votes(tmp_path):
    lst = _populate(make_context(tmp_path))
    assert lst.recommendations == [676, 912]
    assert [r.title_offset for r in lst.recent_recommendations] == [676, 912]
    assert [r.medal for r in lst.recent_recommendations] == [3, 2]
    assert lst.votes == {}


def test_recommendations_capped_at_twenty(tmp_path):
    catalog = sample_catalog()
    catalog["titles"] = [
        {"id": i, "game_id": f"T{i:03d}01", "title_type": 1, "title": f"T{i}"}
        for i in range(25)
    ]
    catalog["recommendation_votes"] = [
        {"game_id": f"T{i:03d}01", "votes": 1} for i in range(25)
    ]
    lst = _populate(make_context(tmp_path, catalog=catalog))
    assert len(lst.recommendations) == 20
    # equal votes keep title order
    assert lst.recommendations == sorted(lst.recommendations)


def test_localized_text_per_language(tmp_path):
    lst = _populate(make_context(tmp_path), NTSC, Language.FRENCH)
    assert lst.titles[0].title == "Super Smash Bros. Brawl (FR)"
    spanish = _populate(make_context(tmp_path), NTSC, Language.SPANISH)
    assert spanish.titles[0].title == "Super Smash Bros. Brawl"


def test_region_filters_rows(tmp_path):
    lst = _populate(make_context(tmp_path), JAPAN, Language.JAPANESE)
    assert [t.title_id for t in lst.titles] == ["RSBE", "RMCE", "RZDE", "RSBJ"]
    assert [r.rating_id for r in lst.ratings] == [1]
    assert lst.detailed_ratings == []
    assert lst.title_types[1].console_name == "ニンテンドーDS"


def test_derived_tables(tmp_path):
    lst = _populate(make_context(tmp_path))
    assert [v.video_id for v in lst.new_videos] == [10]
    assert [p.rank for p in lst.popular_videos] == [1, 2]
    assert [d.rating_id for d in lst.detailed_ratings] == [3]
    assert lst.demos[0].company_offset == lst.company_offsets[1]
    assert (lst.demos[0].removal_year, lst.demos[0].removal_month) == (2009, 1)


def test_metadata_overrides_title_text(tmp_path):
    metadata = StaticMetadataProvider(
        {"RMCE01": {"english": {"title": "Mario Kart", "short_title": "MK"}}}
    )
    lst = _populate(make_context(tmp_path, metadata=metadata))
    assert lst.titles[1].title == "Mario Kart"
    assert lst.titles[1].short_title == "MK"
    assert lst.titles[0].title == "Super Smash Bros. Brawl"


def test_long_text_is_clipped(tmp_path):
    catalog = sample_catalog()
    catalog["titles"][2]["title"] = "x" * 80
    lst = _populate(make_context(tmp_path, catalog=catalog))
    assert lst.titles[2].title == "x" * 31


def test_titles_can_be_disabled(tmp_path):
    lst = _populate(make_context(tmp_path, generate_titles=False))
    assert lst.titles == []
    assert lst.new_titles == []
    assert lst.recommendations == []
    assert lst.header.tables["titles"].offset == 676


def test_rating_images_offset_after_tables(tmp_path):
    (tmp_path / "e.jpg").write_bytes(b"\xff\xd8JPEG-E")
    (tmp_path / "e10.jpg").write_bytes(b"\xff\xd8JPEG-E10")
    catalog = sample_catalog()
    catalog["ratings"][1]["image"] = "e.jpg"
    catalog["ratings"][2]["image"] = "e10.jpg"
    lst = _populate(make_context(tmp_path, catalog=catalog))
    end = len(serialize(lst))
    assert lst.ratings[0].jpeg_offset == end
    assert lst.ratings[0].jpeg_size == 8
    assert lst.ratings[1].jpeg_offset == end + 8
    assert lst.image_data == b"\xff\xd8JPEG-E\xff\xd8JPEG-E10"
    assert lst.current_size() == end + 8 + 10


def test_step_failure_wrapped(tmp_path):
    catalog = sample_catalog()
    del catalog["videos"][0]["video_id"]
    ctx = make_context(tmp_path, catalog=catalog)
    with pytest.raises(CollaboratorError) as ei:
        _populate(ctx)
    assert ei.value.code == E_QUERY
    assert ei.value.context["step"] == "make_video_table"


def test_run_build_writes_verified_list(tmp_path):
    ctx = make_context(tmp_path)
    ctx.prepare()
    result = run_build(ctx, PAL, Language.DUTCH)
    assert result.path == tmp_path / "lists" / "2" / "6" / "dllist.bin"
    payload = result.path.read_bytes()
    info = verify_list(payload)
    assert info["filesize"] == result.filesize == len(payload)
    assert info["checksum"] == result.checksum
    assert info["country_code"] == 110


def test_unquoted_yaml_dates(tmp_path):
    (tmp_path / "catalog.yaml").write_text(
        "list_id: 1\n"
        "titles:\n"
        "  - {id: 1, game_id: RMCE01, title_type: 1, title: MK,\n"
        "     release: 2008-04-27, new: true}\n"
        "demos:\n"
        "  - {demo_id: 5, title: Demo, title_id: 1, removal: 2009-01-31}\n",
        encoding="utf-8",
    )
    ctx = BuildContext(
        catalog=load_catalog(tmp_path / "catalog.yaml"),
        compressor=IdentityCompressor(),
        storage=FileStorage(tmp_path / "lists"),
    )
    lst = _populate(ctx)
    title = lst.titles[0]
    assert (title.release_year, title.release_month, title.release_day) == (
        2008,
        4,
        27,
    )
    demo = lst.demos[0]
    assert (demo.removal_year, demo.removal_month, demo.removal_day) == (2009, 1, 31)


def test_unencodable_text_is_encoding_error(tmp_path):
    catalog = sample_catalog()
    catalog["titles"][2]["title"] = "Twilight \ud800"
    with pytest.raises(EncodingError) as ei:
        _populate(make_context(tmp_path, catalog=catalog))
    assert ei.value.code == E_ENCODE_RANGE

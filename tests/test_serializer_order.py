import io

import pytest

from dllist.constants import Language, REGIONS
from dllist.listing.aggregate import ListAggregate
from dllist.packing.constants import HEADER_SIZE, TABLE_ORDER
from dllist.packing.errors import E_TABLE_ORDER, ProtocolError
from dllist.packing.records import RatingRecord, TitleRecord
from dllist.packing.serializer import serialize, write_table

NTSC = REGIONS[1]


def _aggregate() -> ListAggregate:
    return ListAggregate(NTSC, Language.ENGLISH)


def test_empty_aggregate_is_header_only():
    lst = _aggregate()
    assert len(serialize(lst)) == HEADER_SIZE


def test_header_rating_title_layout():
    lst = _aggregate()
    rating = RatingRecord(rating_id=2, rating_group=1, age=6, title="E")
    title = TitleRecord(id=1, title_id="RSBE", title_type=1, title="Brawl")
    assert lst.add_table("ratings", [rating]) == HEADER_SIZE
    assert lst.add_table("titles", [title]) == HEADER_SIZE + 34
    data = serialize(lst)
    assert len(data) == HEADER_SIZE + 34 + 236
    assert data[HEADER_SIZE : HEADER_SIZE + 34] == rating.pack()
    assert data[HEADER_SIZE + 34 :] == title.pack()


def test_serialize_is_deterministic():
    lst = _aggregate()
    lst.add_table(
        "ratings",
        [RatingRecord(rating_id=i, rating_group=1, age=i) for i in range(1, 4)],
    )
    lst.add_table("new_titles", [HEADER_SIZE, HEADER_SIZE + 236])
    assert serialize(lst) == serialize(lst)


def test_records_keep_insertion_order():
    lst = _aggregate()
    first = RatingRecord(rating_id=9, rating_group=1, age=17)
    second = RatingRecord(rating_id=1, rating_group=1, age=3)
    lst.add_table("ratings", [first, second])
    data = serialize(lst)
    assert data[HEADER_SIZE] == 9
    assert data[HEADER_SIZE + 34] == 1


def test_index_tables_are_u32():
    buf = io.BytesIO()
    write_table(buf, "recommendations", [1, 0x01020304])
    assert buf.getvalue() == b"\x00\x00\x00\x01\x01\x02\x03\x04"


def test_non_record_entry_rejected():
    with pytest.raises(TypeError):
        write_table(io.BytesIO(), "ratings", [object()])


def test_tables_must_follow_canonical_order():
    lst = _aggregate()
    lst.add_table("titles", [])
    with pytest.raises(ProtocolError) as ei:
        lst.add_table("ratings", [])
    assert ei.value.code == E_TABLE_ORDER
    with pytest.raises(ProtocolError):
        lst.add_table("titles", [])


def test_empty_tables_get_current_offset():
    lst = _aggregate()
    for name in TABLE_ORDER:
        lst.add_table(name, [])
    for name in TABLE_ORDER:
        assert lst.header.tables[name].offset == HEADER_SIZE
        assert lst.header.tables[name].count == 0
    assert lst.populated == TABLE_ORDER


def test_unknown_table_name():
    with pytest.raises(KeyError):
        _aggregate().table("thumbnails")

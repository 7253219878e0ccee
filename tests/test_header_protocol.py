import zlib

import pytest

from dllist.constants import Language, REGIONS
from dllist.listing.aggregate import ListAggregate
from dllist.packing.checksum import crc32_ieee, zero_checksum_field
from dllist.packing.constants import FILESIZE_OFFSET, HEADER_SIZE
from dllist.packing.errors import ProtocolError
from dllist.packing.protocol import checksum_pass, finalize, size_pass
from dllist.packing.records import CompanyRecord, RatingRecord, TitleRecord

PAL = REGIONS[2]


def _populated() -> ListAggregate:
    lst = ListAggregate(PAL, Language.GERMAN)
    lst.header.version = 6
    lst.header.list_id = 42
    lst.add_table(
        "ratings", [RatingRecord(rating_id=4, rating_group=2, age=3, title="3")]
    )
    lst.add_table(
        "companies",
        [CompanyRecord(company_id=1, developer="Nintendo", publisher="Nintendo")],
    )
    return lst


def test_filesize_field_matches_payload_length():
    final = finalize(_populated())
    stored = int.from_bytes(
        final.payload[FILESIZE_OFFSET : FILESIZE_OFFSET + 4], "big"
    )
    assert stored == len(final.payload) == final.filesize


def test_checksum_covers_payload_with_zeroed_field():
    final = finalize(_populated())
    assert int.from_bytes(final.payload[8:12], "big") == final.checksum
    assert crc32_ieee(zero_checksum_field(final.payload)) == final.checksum


def test_pass_lengths_agree_and_list_is_sealed():
    lst = _populated()
    final = finalize(lst)
    assert len(set(final.pass_lengths)) == 1
    assert lst.sealed
    with pytest.raises(ProtocolError):
        lst.add_table("detailed_ratings", [])


def test_finalize_is_reproducible():
    assert finalize(_populated()).payload == finalize(_populated()).payload


def test_checksum_pass_requires_zero_checksum():
    lst = _populated()
    size_pass(lst)
    lst.header.checksum = 1
    with pytest.raises(ProtocolError):
        checksum_pass(lst)


def test_size_pass_resets_stale_fields():
    lst = _populated()
    lst.header.filesize = 999
    lst.header.checksum = 123
    length = size_pass(lst)
    assert lst.header.filesize == length
    assert lst.header.checksum == 0


def test_one_rating_one_title_scenario():
    lst = ListAggregate(PAL, Language.ENGLISH)
    lst.add_table(
        "ratings", [RatingRecord(rating_id=4, rating_group=2, age=3, title="3")]
    )
    lst.add_table("titles", [TitleRecord(id=1, title_id="RSBP", title_type=1)])
    final = finalize(lst)
    expected = HEADER_SIZE + RatingRecord.size() + TitleRecord.size()
    assert final.filesize == expected == len(final.payload)
    assert lst.header.filesize == expected
    zeroed = final.payload[:8] + b"\x00" * 4 + final.payload[12:]
    assert zlib.crc32(zeroed) & 0xFFFFFFFF == final.checksum

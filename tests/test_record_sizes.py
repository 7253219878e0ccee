from dllist.packing.constants import HEADER_SIZE, TABLE_ORDER
from dllist.packing.header import Header, parse_header
from dllist.packing.records import (
    CompanyRecord,
    DemoRecord,
    DetailedRatingRecord,
    NewVideoRecord,
    PopularVideoRecord,
    RatingRecord,
    RecentRecommendationRecord,
    TitleRecord,
    TitleTypeRecord,
    VideoRecord,
)


def test_record_sizes():
    assert RatingRecord.size() == 34
    assert TitleTypeRecord.size() == 108
    assert CompanyRecord.size() == 128
    assert TitleRecord.size() == 236
    assert VideoRecord.size() == 276
    assert NewVideoRecord.size() == 232
    assert DemoRecord.size() == 352
    assert RecentRecommendationRecord.size() == 6
    assert PopularVideoRecord.size() == 234
    assert DetailedRatingRecord.size() == 206


def test_packed_records_match_declared_size():
    records = [
        RatingRecord(rating_id=1, rating_group=1, age=6, title="E"),
        TitleTypeRecord(type_id=1, console_model="RVL", console_name="Wii"),
        CompanyRecord(company_id=1, developer="Nintendo", publisher="Nintendo"),
        TitleRecord(id=1, title_id="RSBE", title_type=1, genre=[1]),
        VideoRecord(video_id=1, length=30, title_id=1, title="Trailer"),
        NewVideoRecord(video_id=1, length=30, title_id=1),
        DemoRecord(demo_id=1, title="Demo", title_id=1),
        RecentRecommendationRecord(title_offset=1000, medal=2),
        PopularVideoRecord(video_id=1, length=30, title_id=1, rank=1),
        DetailedRatingRecord(rating_group=1, rating_id=3, title="Violence"),
    ]
    for rec in records:
        assert len(rec.pack()) == rec.size(), type(rec).__name__


def test_rating_record_layout():
    rec = RatingRecord(
        rating_id=2, rating_group=1, age=6, title="E", jpeg_offset=0x1000, jpeg_size=5
    )
    raw = rec.pack()
    assert raw[0:4] == b"\x02\x01\x06\x00"
    assert raw[4:8] == b"\x00\x00\x10\x00"
    assert raw[8:12] == b"\x00\x00\x00\x05"
    assert raw[12:14] == "E".encode("utf-16-be")


def test_header_size_and_parse():
    header = Header(
        version=6, filesize=500, checksum=0xDEADBEEF, list_id=7, language_code=1
    )
    header.tables["titles"].count = 3
    header.tables["titles"].offset = 676
    raw = header.pack()
    assert len(raw) == HEADER_SIZE == 136
    assert raw[4:8] == (500).to_bytes(4, "big")
    assert raw[8:12] == b"\xde\xad\xbe\xef"
    parsed = parse_header(raw)
    assert parsed.version == 6
    assert parsed.checksum == 0xDEADBEEF
    assert parsed.tables["titles"].count == 3
    assert parsed.tables["titles"].offset == 676
    assert list(parsed.tables) == list(TABLE_ORDER)

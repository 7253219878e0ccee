from dllist.packing.checksum import (
    compute_list_checksum,
    crc32_ieee,
    zero_checksum_field,
)


def test_crc32_ieee_check_value():
    assert crc32_ieee(b"123456789") == 0xCBF43926
    assert crc32_ieee(b"") == 0


def test_zero_checksum_field_only_touches_bytes_8_to_12():
    payload = bytes(range(20))
    zeroed = zero_checksum_field(payload)
    assert zeroed[:8] == payload[:8]
    assert zeroed[8:12] == b"\x00\x00\x00\x00"
    assert zeroed[12:] == payload[12:]


def test_list_checksum_ignores_stored_checksum():
    payload = bytearray(64)
    before = compute_list_checksum(bytes(payload))
    payload[8:12] = b"\xaa\xbb\xcc\xdd"
    assert compute_list_checksum(bytes(payload)) == before

"""CRC-32 (IEEE 802.3 polynomial) as expected by the console's reader."""

from __future__ import annotations

import zlib

from .constants import CHECKSUM_OFFSET, CHECKSUM_SIZE

__all__ = ["crc32_ieee", "zero_checksum_field", "compute_list_checksum"]


def crc32_ieee(data: bytes) -> int:
    return zlib.crc32(data) & 0xFFFFFFFF


def zero_checksum_field(payload: bytes) -> bytes:
    end = CHECKSUM_OFFSET + CHECKSUM_SIZE
    return payload[:CHECKSUM_OFFSET] + b"\x00" * CHECKSUM_SIZE + payload[end:]


def compute_list_checksum(payload: bytes) -> int:
    """CRC of ``payload`` with its own checksum field treated as zero."""
    return crc32_ieee(zero_checksum_field(payload))

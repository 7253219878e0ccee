"""Download list inspection and verification.

Public functions:
- inspect_list(payload) -> dict
- validate_list(payload) -> list[str]
- verify_list(payload) -> dict (raises on the first broken invariant)
"""

from __future__ import annotations

from typing import Any, Dict, List

from .checksum import compute_list_checksum
from .constants import INDEX_ENTRY_SIZE, INDEX_TABLES, TABLE_ORDER
from .errors import ProtocolError, E_CRC_MISMATCH, E_SIZE_MISMATCH
from .header import parse_header
from .records import (
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

__all__ = ["RECORD_TYPES", "inspect_list", "validate_list", "verify_list"]

RECORD_TYPES = {
    "ratings": RatingRecord,
    "title_types": TitleTypeRecord,
    "companies": CompanyRecord,
    "titles": TitleRecord,
    "videos": VideoRecord,
    "new_videos": NewVideoRecord,
    "demos": DemoRecord,
    "recent_recommendations": RecentRecommendationRecord,
    "popular_videos": PopularVideoRecord,
    "detailed_ratings": DetailedRatingRecord,
}


def _entry_size(name: str) -> int:
    if name in INDEX_TABLES:
        return INDEX_ENTRY_SIZE
    return RECORD_TYPES[name].size()


def inspect_list(payload: bytes) -> Dict[str, Any]:
    header = parse_header(payload)
    tables = []
    for name in TABLE_ORDER:
        entry = header.tables[name]
        tables.append(
            {
                "name": name,
                "count": entry.count,
                "offset": entry.offset,
                "entry_size": _entry_size(name),
            }
        )
    return {
        "size": len(payload),
        "version": header.version,
        "filesize": header.filesize,
        "checksum": header.checksum,
        "computed_checksum": compute_list_checksum(payload),
        "list_id": header.list_id,
        "country_code": header.country_code,
        "language_code": header.language_code,
        "tables": tables,
    }


def validate_list(payload: bytes) -> List[str]:
    info = inspect_list(payload)
    errors: List[str] = []
    if info["filesize"] != info["size"]:
        errors.append(
            f"{E_SIZE_MISMATCH}: header filesize {info['filesize']} != payload size {info['size']}"
        )
    if info["checksum"] != info["computed_checksum"]:
        errors.append(
            f"{E_CRC_MISMATCH}: header crc 0x{info['checksum']:08x} != computed 0x{info['computed_checksum']:08x}"
        )
    for t in info["tables"]:
        end = t["offset"] + t["count"] * t["entry_size"]
        if t["count"] and end > info["size"]:
            errors.append(
                f"{E_SIZE_MISMATCH}: table {t['name']} ends at {end} beyond payload size {info['size']}"
            )
    return errors


def verify_list(payload: bytes) -> Dict[str, Any]:
    info = inspect_list(payload)
    if info["filesize"] != info["size"]:
        raise ProtocolError(
            E_SIZE_MISMATCH,
            f"Header filesize {info['filesize']} does not match payload size {info['size']}",
            {"filesize": info["filesize"], "size": info["size"]},
        )
    if info["checksum"] != info["computed_checksum"]:
        raise ProtocolError(
            E_CRC_MISMATCH,
            f"Header checksum 0x{info['checksum']:08x} does not match 0x{info['computed_checksum']:08x}",
            {
                "checksum": info["checksum"],
                "computed": info["computed_checksum"],
            },
        )
    return info

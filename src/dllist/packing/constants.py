"""Binary format constants for the download list."""

from __future__ import annotations

# Format revision written into the header.
LIST_VERSION = 6

# Canonical table order. The legacy reader parses tables in exactly this
# sequence, so population and serialization must both follow it.
TABLE_ORDER = (
    "ratings",
    "title_types",
    "companies",
    "titles",
    "new_titles",
    "videos",
    "new_videos",
    "demos",
    "recommendations",
    "recent_recommendations",
    "popular_videos",
    "detailed_ratings",
)

# Tables holding bare u32 offsets rather than records.
INDEX_TABLES = frozenset({"new_titles", "recommendations"})

INDEX_ENTRY_SIZE = 4

# Header prefix: u16 + u8 + u8 + 6 * u32 + 9 reserved + 3 pad.
HEADER_PREFIX_SIZE = 40
TABLE_DIRECTORY_ENTRY_SIZE = 8
HEADER_SIZE = HEADER_PREFIX_SIZE + TABLE_DIRECTORY_ENTRY_SIZE * len(
    TABLE_ORDER
)

FILESIZE_OFFSET = 4
CHECKSUM_OFFSET = 8
CHECKSUM_SIZE = 4

MAX_RECOMMENDATIONS = 20

__all__ = [
    "LIST_VERSION",
    "TABLE_ORDER",
    "INDEX_TABLES",
    "INDEX_ENTRY_SIZE",
    "HEADER_PREFIX_SIZE",
    "TABLE_DIRECTORY_ENTRY_SIZE",
    "HEADER_SIZE",
    "FILESIZE_OFFSET",
    "CHECKSUM_OFFSET",
    "CHECKSUM_SIZE",
    "MAX_RECOMMENDATIONS",
]

"""Download list header.

The header leads the payload and carries two self-referential fields,
``filesize`` and ``checksum``. Both are fixed-width, so their values never
change the serialized length; see :mod:`dllist.packing.protocol`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict
import struct

from .constants import (
    HEADER_PREFIX_SIZE,
    HEADER_SIZE,
    TABLE_ORDER,
)
from .errors import ProtocolError, E_SIZE_MISMATCH
from .fields import pack_uint

__all__ = ["TableEntry", "Header", "parse_header"]


@dataclass(slots=True)
class TableEntry:
    count: int = 0
    offset: int = 0


def _empty_directory() -> Dict[str, TableEntry]:
    return {name: TableEntry() for name in TABLE_ORDER}


@dataclass(slots=True)
class Header:
    version: int = 0
    filesize: int = 0
    checksum: int = 0
    list_id: int = 0
    thumbnail_id: int = 0
    country_code: int = 0
    language_code: int = 0
    tables: Dict[str, TableEntry] = field(default_factory=_empty_directory)

    def pack(self) -> bytes:
        out = (
            b"\x00\x00"
            + pack_uint(self.version, 1, "version")
            + b"\x00"
            + pack_uint(self.filesize, 4, "filesize")
            + pack_uint(self.checksum, 4, "checksum")
            + pack_uint(self.list_id, 4, "list_id")
            + pack_uint(self.thumbnail_id, 4, "thumbnail_id")
            + pack_uint(self.country_code, 4, "country_code")
            + pack_uint(self.language_code, 4, "language_code")
            + b"\x00" * 12
        )
        for name in TABLE_ORDER:
            entry = self.tables[name]
            out += pack_uint(entry.count, 4, f"{name}.count")
            out += pack_uint(entry.offset, 4, f"{name}.offset")
        return out


def parse_header(data: bytes) -> Header:
    if len(data) < HEADER_SIZE:
        raise ProtocolError(
            E_SIZE_MISMATCH,
            f"Payload of {len(data)} bytes is shorter than the header ({HEADER_SIZE})",
        )
    (
        version,
        filesize,
        checksum,
        list_id,
        thumbnail_id,
        country_code,
        language_code,
    ) = struct.unpack_from(">2xBxIIIIII", data, 0)
    header = Header(
        version=version,
        filesize=filesize,
        checksum=checksum,
        list_id=list_id,
        thumbnail_id=thumbnail_id,
        country_code=country_code,
        language_code=language_code,
    )
    off = HEADER_PREFIX_SIZE
    for name in TABLE_ORDER:
        count, offset = struct.unpack_from(">II", data, off)
        header.tables[name] = TableEntry(count=count, offset=offset)
        off += 8
    return header

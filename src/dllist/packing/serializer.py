"""Ordered binary writer for a populated list aggregate.

Writes the header followed by every table in :data:`TABLE_ORDER`. Records
keep insertion order, index tables are emitted as big-endian u32 values,
and no padding is added between records or tables. The output depends
only on the aggregate's contents, so repeated calls are byte-identical.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, BinaryIO, Iterable

from .constants import INDEX_TABLES, TABLE_ORDER
from .fields import pack_uint
from .records import Record

if TYPE_CHECKING:  # pragma: no cover
    from ..listing.aggregate import ListAggregate

__all__ = ["write_table", "write_all", "serialize"]


def write_table(f: BinaryIO, name: str, entries: Iterable) -> None:
    if name in INDEX_TABLES:
        for i, value in enumerate(entries):
            f.write(pack_uint(value, 4, f"{name}[{i}]"))
        return
    for record in entries:
        if not isinstance(record, Record):
            raise TypeError(
                f"Table {name} holds {type(record).__name__}, expected a Record"
            )
        f.write(record.pack())


def write_all(aggregate: "ListAggregate", f: BinaryIO) -> None:
    f.write(aggregate.header.pack())
    for name in TABLE_ORDER:
        write_table(f, name, aggregate.table(name))


def serialize(aggregate: "ListAggregate") -> bytes:
    buf = io.BytesIO()
    write_all(aggregate, buf)
    return buf.getvalue()

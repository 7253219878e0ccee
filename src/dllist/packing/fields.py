"""Fixed-width big-endian field encoders.

Every encoder validates that the value fits its field and raises
:class:`EncodingError` otherwise; nothing is silently truncated.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Sequence

from .errors import EncodingError, E_ENCODE_LENGTH, E_ENCODE_RANGE

__all__ = [
    "FieldSpec",
    "pack_uint",
    "pack_bytes",
    "pack_utf16",
    "pack_fields",
    "layout_size",
]

_UINT_FORMATS = {1: ">B", 2: ">H", 4: ">I"}
_UINT_KINDS = {"u8": 1, "u16": 2, "u32": 4}


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One field of a record layout.

    ``name`` of ``None`` marks a reserved field that is always zero-filled.
    ``length`` counts bytes for ``bytes`` fields and UTF-16 code units for
    ``utf16`` fields; it is ignored for integer kinds.
    """

    name: str | None
    kind: str
    length: int = 0

    @property
    def size(self) -> int:
        if self.kind in _UINT_KINDS:
            return _UINT_KINDS[self.kind]
        if self.kind == "bytes":
            return self.length
        if self.kind == "utf16":
            return self.length * 2
        raise ValueError(f"Unknown field kind {self.kind}")


def pack_uint(value: Any, width: int, field: str = "") -> bytes:
    fmt = _UINT_FORMATS.get(width)
    if fmt is None:
        raise ValueError(f"Unsupported integer width {width}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(
            E_ENCODE_RANGE,
            f"Field '{field}' expects an integer, got {type(value).__name__}",
            {"field": field},
        )
    limit = 1 << (8 * width)
    if value < 0 or value >= limit:
        raise EncodingError(
            E_ENCODE_RANGE,
            f"Value {value} does not fit {width * 8}-bit field '{field}'",
            {"field": field, "value": value, "width": width},
        )
    return struct.pack(fmt, value)


def pack_bytes(value: Any, size: int, field: str = "") -> bytes:
    if isinstance(value, str):
        try:
            value = value.encode("ascii")
        except UnicodeEncodeError as exc:
            raise EncodingError(
                E_ENCODE_RANGE,
                f"Field '{field}' only holds ASCII text",
                {"field": field, "text": value},
            ) from exc
    elif isinstance(value, (list, tuple)):
        for item in value:
            pack_uint(item, 1, field)
        value = bytes(value)
    if not isinstance(value, (bytes, bytearray)):
        raise EncodingError(
            E_ENCODE_LENGTH,
            f"Field '{field}' expects bytes, got {type(value).__name__}",
            {"field": field},
        )
    if len(value) > size:
        raise EncodingError(
            E_ENCODE_LENGTH,
            f"Field '{field}' holds {size} bytes, got {len(value)}",
            {"field": field, "size": size, "actual": len(value)},
        )
    return bytes(value) + b"\x00" * (size - len(value))


def pack_utf16(value: Any, chars: int, field: str = "") -> bytes:
    text = "" if value is None else str(value)
    try:
        raw = text.encode("utf-16-be")
    except UnicodeEncodeError as exc:
        raise EncodingError(
            E_ENCODE_RANGE,
            f"Text for '{field}' is not encodable as UTF-16",
            {"field": field, "text": text},
        ) from exc
    size = chars * 2
    if len(raw) > size:
        raise EncodingError(
            E_ENCODE_LENGTH,
            f"Text for '{field}' needs {len(raw) // 2} code units, field holds {chars}",
            {"field": field, "chars": chars, "text": text},
        )
    return raw + b"\x00" * (size - len(raw))


def pack_fields(obj: Any, layout: Sequence[FieldSpec]) -> bytes:
    out = bytearray()
    for spec in layout:
        if spec.name is None:
            out += b"\x00" * spec.size
            continue
        value = getattr(obj, spec.name)
        if spec.kind in _UINT_KINDS:
            out += pack_uint(value, spec.size, spec.name)
        elif spec.kind == "bytes":
            out += pack_bytes(value, spec.length, spec.name)
        else:
            out += pack_utf16(value, spec.length, spec.name)
    return bytes(out)


def layout_size(layout: Sequence[FieldSpec]) -> int:
    return sum(spec.size for spec in layout)

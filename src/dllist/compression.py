"""Compressors applied to the finalized payload before it is stored."""

from __future__ import annotations

from typing import Protocol

import ndspy.lz10

from .packing.errors import CollaboratorError, E_COMPRESS

__all__ = [
    "Compressor",
    "Lz10Compressor",
    "IdentityCompressor",
    "decompress_lz10",
]


class Compressor(Protocol):
    name: str

    def compress(self, data: bytes) -> bytes: ...

    def decompress(self, data: bytes) -> bytes: ...


class Lz10Compressor:
    """Nintendo LZ10 (LZ77 type 0x10), the format the console expects."""

    name = "lz10"

    def compress(self, data: bytes) -> bytes:
        try:
            return bytes(ndspy.lz10.compress(data))
        except Exception as exc:
            raise CollaboratorError(
                E_COMPRESS,
                f"LZ10 compression failed: {exc}",
                {"size": len(data)},
            ) from exc

    def decompress(self, data: bytes) -> bytes:
        try:
            return bytes(ndspy.lz10.decompress(data))
        except Exception as exc:
            raise CollaboratorError(
                E_COMPRESS,
                f"LZ10 decompression failed: {exc}",
                {"size": len(data)},
            ) from exc


class IdentityCompressor:
    name = "none"

    def compress(self, data: bytes) -> bytes:
        return bytes(data)

    def decompress(self, data: bytes) -> bytes:
        return bytes(data)


def decompress_lz10(data: bytes) -> bytes:
    return Lz10Compressor().decompress(data)

"""Three-pass protocol resolving the header's self-referential fields.

1. size pass: serialize with ``filesize = 0`` and ``checksum = 0``; the
   resulting length ``L`` becomes ``filesize``.
2. checksum pass: serialize with ``filesize = L`` and ``checksum = 0``;
   the CRC-32 of those bytes becomes ``checksum``.
3. final pass: serialize with both fields set. This is the payload that
   gets compressed and stored.

Each pass is a full serializer invocation; no byte buffer is patched in
place. All three lengths must agree, otherwise :class:`ProtocolError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..logging import get_logger
from .checksum import crc32_ieee
from .errors import ProtocolError, E_SIZE_MISMATCH
from .serializer import serialize

if TYPE_CHECKING:  # pragma: no cover
    from ..listing.aggregate import ListAggregate

__all__ = [
    "FinalizedList",
    "size_pass",
    "checksum_pass",
    "final_pass",
    "finalize",
]


@dataclass(frozen=True, slots=True)
class FinalizedList:
    payload: bytes
    filesize: int
    checksum: int
    pass_lengths: tuple[int, int, int]


def size_pass(aggregate: "ListAggregate") -> int:
    aggregate.header.filesize = 0
    aggregate.header.checksum = 0
    length = len(serialize(aggregate))
    aggregate.header.filesize = length
    return length


def checksum_pass(aggregate: "ListAggregate") -> tuple[int, int]:
    """Return ``(length, crc)`` and store the CRC in the header."""
    if aggregate.header.checksum != 0:
        raise ProtocolError(
            E_SIZE_MISMATCH,
            "Checksum pass requires a zero checksum field",
            {"checksum": aggregate.header.checksum},
        )
    data = serialize(aggregate)
    crc = crc32_ieee(data)
    aggregate.header.checksum = crc
    return len(data), crc


def final_pass(aggregate: "ListAggregate") -> bytes:
    return serialize(aggregate)


def finalize(aggregate: "ListAggregate") -> FinalizedList:
    logger = get_logger()
    size_len = size_pass(aggregate)
    crc_len, crc = checksum_pass(aggregate)
    payload = final_pass(aggregate)
    lengths = (size_len, crc_len, len(payload))
    if len(set(lengths)) != 1:
        raise ProtocolError(
            E_SIZE_MISMATCH,
            f"Serialized length changed between passes: {lengths}",
            {"lengths": list(lengths)},
        )
    aggregate.seal()
    logger.debug(
        "Finalized list: filesize=%d crc=0x%08x", size_len, crc
    )
    return FinalizedList(
        payload=payload,
        filesize=size_len,
        checksum=crc,
        pass_lengths=lengths,
    )

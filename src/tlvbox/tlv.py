"""TLV (Type-Length-Value) record encoding and decoding.

Each record in a box payload is encoded as:
    Offset  Size  Field
    0       4     Type (little-endian u32 tag)
    4       4     Length (little-endian u32, size of value)
    8       N     Value (record data, N = Length)

Total record size: 8 + Length bytes.
Records are packed contiguously with no alignment, padding, framing or
checksum. The stream is not self-terminating: it runs to the end of the
buffer handed to the decoder.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from tlvbox.errors import DecodeError, EncodeError, LimitExceededError, TruncatedError

# TLV header: type(I) + length(I) = 8 bytes
_TLV_HDR_FMT = struct.Struct("<II")
_TLV_HDR_SIZE = 8

TAG_MAX = 0xFFFFFFFF
MAX_PAYLOAD_SIZE = 0xFFFFFFFF

Buffer = bytes | bytearray | memoryview


@dataclass(slots=True)
class TlvRecord:
    """A single TLV record."""

    tag: int
    value: bytes

    @property
    def total_size(self) -> int:
        return _TLV_HDR_SIZE + len(self.value)

    def encode(self) -> bytes:
        """Encode this record to bytes.

        Raises:
            tlvbox.errors.EncodeError: if the tag or length does not fit a
                u32, or the value is not bytes-like.
        """
        try:
            return _TLV_HDR_FMT.pack(self.tag, len(self.value)) + bytes(self.value)
        except (struct.error, TypeError) as e:
            raise EncodeError(f"Cannot encode record with tag {self.tag!r}: {e}") from e


def encode_records(records: Iterable[TlvRecord]) -> bytes:
    """Encode TLV records into a contiguous payload."""
    parts: list[bytes] = []
    for rec in records:
        parts.append(rec.encode())
    return b"".join(parts)


def iter_records(buffer: Buffer, offset: int = 0) -> Iterator[TlvRecord]:
    """Yield TLV records from ``offset`` to the end of ``buffer``.

    Raises:
        tlvbox.errors.DecodeError: if ``offset`` lies outside the buffer.
        tlvbox.errors.TruncatedError: if a header or a declared payload
            runs past the end of the buffer.
    """
    size = len(buffer)
    if offset < 0 or offset > size:
        raise DecodeError(f"Offset {offset} outside buffer of {size} bytes")

    while offset < size:
        if offset + _TLV_HDR_SIZE > size:
            raise TruncatedError(offset, _TLV_HDR_SIZE, size - offset)
        tag, length = _TLV_HDR_FMT.unpack_from(buffer, offset)

        start = offset + _TLV_HDR_SIZE
        end = start + length
        if end > size:
            raise TruncatedError(offset, _TLV_HDR_SIZE + length, size - offset)

        yield TlvRecord(tag=tag, value=bytes(buffer[start:end]))
        offset = end


def decode_records(
    buffer: Buffer,
    offset: int = 0,
    *,
    max_records: int | None = None,
) -> list[TlvRecord]:
    """Decode TLV records from a contiguous payload.

    Args:
        buffer: Raw bytes containing packed TLV records.
        offset: Position of the first record.
        max_records: Optional ceiling on the number of records.

    Returns:
        List of decoded TlvRecord objects, in wire order.
    """
    records: list[TlvRecord] = []
    for rec in iter_records(buffer, offset):
        if max_records is not None and len(records) >= max_records:
            raise LimitExceededError("entries", len(records) + 1, max_records)
        records.append(rec)
    return records

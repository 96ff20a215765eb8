"""TlvBox: a mapping from 32-bit tags to opaque payloads.

A box decodes from and encodes to the TLV stream described in
:mod:`tlvbox.tlv`. On top of the raw payloads it offers typed get/put
pairs, one per width class; the stored bytes stay type-agnostic and the
same payload may be read back under any accessor.

Example::

    from tlvbox import TlvBox

    box = TlvBox().put_int(0x06, 3).put_string(0x10, "alice")
    data = box.encode()

    again = TlvBox.from_bytes(data)
    again.get_int(0x06)     # 3
    again.get_string(0x11)  # None, tag never set

Duplicate tags on the wire are tolerated: the last record wins. Producers
should not rely on that.
"""

from __future__ import annotations

import dataclasses
import logging
import struct
from collections.abc import Iterator

from tlvbox.config import DEFAULT_LIMITS, DecodeLimits
from tlvbox.errors import (
    DecodeError,
    EncodeError,
    LimitExceededError,
    MalformedPayloadError,
    PayloadTooLargeError,
)
from tlvbox.tlv import MAX_PAYLOAD_SIZE, TAG_MAX, Buffer, TlvRecord, iter_records

log = logging.getLogger("tlvbox.container")

_I16 = struct.Struct("<h")
_I32 = struct.Struct("<i")
_I64 = struct.Struct("<q")
_F32 = struct.Struct("<f")
_F64 = struct.Struct("<d")


class TlvBox:
    """Insertion-ordered tag → payload mapping with a binary codec."""

    def __init__(self, limits: DecodeLimits | None = None, *, depth: int = 0) -> None:
        self._entries: dict[int, bytes] = {}
        self._limits = limits if limits is not None else dataclasses.replace(DEFAULT_LIMITS)
        self._depth = depth

    @classmethod
    def from_bytes(
        cls,
        buffer: Buffer,
        offset: int = 0,
        *,
        limits: DecodeLimits | None = None,
        depth: int = 0,
    ) -> TlvBox:
        """Create a box and populate it from ``buffer[offset:]``."""
        return cls(limits, depth=depth).decode(buffer, offset)

    @property
    def limits(self) -> DecodeLimits:
        return self._limits

    @property
    def depth(self) -> int:
        return self._depth

    # ----- mapping protocol -----

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, tag: object) -> bool:
        return tag in self._entries

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TlvBox):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None

    def __repr__(self) -> str:
        tags = ", ".join(f"{t:#x}" for t in self._entries)
        return f"TlvBox(depth={self._depth}, tags=[{tags}])"

    def tags(self) -> list[int]:
        """Return the tags currently set, in insertion order."""
        return list(self._entries)

    # ----- serialization -----

    def decode(self, buffer: Buffer, offset: int = 0) -> TlvBox:
        """Populate this box from the records in ``buffer[offset:]``.

        Existing entries are kept; records on the wire overwrite tags that
        are already set. On error, records decoded before the failing one
        remain in the box.

        Raises:
            tlvbox.errors.TruncatedError: on a truncated header or payload.
            tlvbox.errors.LimitExceededError: when depth, size or entry
                count exceed this box's limits.
            tlvbox.errors.DecodeError: if ``offset`` lies outside the buffer.
        """
        limits = self._limits
        if self._depth > limits.max_depth:
            raise LimitExceededError("depth", self._depth, limits.max_depth)
        span = len(buffer) - offset
        if span > limits.max_size:
            raise LimitExceededError("size", span, limits.max_size)

        count = 0
        for rec in iter_records(buffer, offset):
            count += 1
            if count > limits.max_entries:
                raise LimitExceededError("entries", count, limits.max_entries)
            self._entries[rec.tag] = rec.value

        log.debug("Decoded %d records (%d bytes) at depth %d", count, max(span, 0), self._depth)
        return self

    def encode(self) -> bytes:
        """Serialize every entry, one record per tag, in insertion order."""
        return b"".join(
            TlvRecord(tag=tag, value=value).encode()
            for tag, value in self._entries.items()
        )

    # ----- raw bytes -----

    def get_bytes(self, tag: int) -> bytes | None:
        """Return the raw payload for ``tag``, or None if not set."""
        return self._entries.get(tag)

    def put_bytes(self, tag: int, value: bytes | bytearray | memoryview) -> TlvBox:
        """Store ``value`` under ``tag``, replacing any previous payload."""
        if not 0 <= tag <= TAG_MAX:
            raise EncodeError(f"Tag out of u32 range: {tag}")
        if len(value) > MAX_PAYLOAD_SIZE:
            raise PayloadTooLargeError(tag, len(value))
        self._entries[tag] = bytes(value)
        return self

    # ----- fixed-width numbers -----

    def _get_fixed(self, tag: int, fmt: struct.Struct) -> int | float | None:
        payload = self._entries.get(tag)
        if payload is None:
            return None
        if len(payload) < fmt.size:
            raise MalformedPayloadError(tag, fmt.size, len(payload))
        return fmt.unpack_from(payload)[0]

    def _put_fixed(self, tag: int, fmt: struct.Struct, value: int | float) -> TlvBox:
        try:
            payload = fmt.pack(value)
        except (struct.error, OverflowError) as e:
            raise EncodeError(f"Cannot encode {value!r} for tag {tag:#x}: {e}") from e
        return self.put_bytes(tag, payload)

    def get_short(self, tag: int) -> int | None:
        return self._get_fixed(tag, _I16)

    def put_short(self, tag: int, value: int) -> TlvBox:
        return self._put_fixed(tag, _I16, value)

    def get_int(self, tag: int) -> int | None:
        return self._get_fixed(tag, _I32)

    def put_int(self, tag: int, value: int) -> TlvBox:
        return self._put_fixed(tag, _I32, value)

    def get_long(self, tag: int) -> int | None:
        return self._get_fixed(tag, _I64)

    def put_long(self, tag: int, value: int) -> TlvBox:
        return self._put_fixed(tag, _I64, value)

    def get_float(self, tag: int) -> float | None:
        return self._get_fixed(tag, _F32)

    def put_float(self, tag: int, value: float) -> TlvBox:
        return self._put_fixed(tag, _F32, value)

    def get_double(self, tag: int) -> float | None:
        return self._get_fixed(tag, _F64)

    def put_double(self, tag: int, value: float) -> TlvBox:
        return self._put_fixed(tag, _F64, value)

    # ----- text -----

    def get_string(self, tag: int) -> str | None:
        """Return the payload decoded as UTF-8 (invalid bytes replaced)."""
        payload = self._entries.get(tag)
        if payload is None:
            return None
        return payload.decode("utf-8", errors="replace")

    def put_string(self, tag: int, value: str) -> TlvBox:
        try:
            payload = value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodeError(f"Cannot encode string for tag {tag:#x}: {e}") from e
        return self.put_bytes(tag, payload)

    # ----- nested boxes -----

    def get_box(self, tag: int) -> TlvBox | None:
        """Decode the payload for ``tag`` as a nested box.

        Returns None both when the tag is not set and when the payload does
        not decode; the latter is logged at WARNING.
        """
        payload = self._entries.get(tag)
        if payload is None:
            return None
        try:
            return TlvBox.from_bytes(payload, limits=self._limits, depth=self._depth + 1)
        except DecodeError as e:
            log.warning("Nested box at tag %#010x failed to decode: %s", tag, e)
            return None

    def put_box(self, tag: int, box: TlvBox) -> TlvBox:
        return self.put_bytes(tag, box.encode())

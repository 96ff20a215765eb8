"""TLV box error types."""

from __future__ import annotations


class TlvError(Exception):
    """Base exception for all tlvbox errors."""


class DecodeError(TlvError):
    """Malformed record structure (bad offset, truncated record)."""


class TruncatedError(DecodeError):
    """A record header or payload runs past the end of the buffer."""

    def __init__(self, offset: int, needed: int, available: int) -> None:
        super().__init__(
            f"Truncated record at offset {offset}: "
            f"need {needed} bytes, {available} available"
        )
        self.offset = offset
        self.needed = needed
        self.available = available


class LimitExceededError(DecodeError):
    """Input breaches a decode ceiling (depth, size or entry count)."""

    def __init__(self, limit: str, value: int, maximum: int) -> None:
        super().__init__(f"{limit} limit exceeded: {value} > {maximum}")
        self.limit = limit
        self.value = value
        self.maximum = maximum


class MalformedPayloadError(TlvError):
    """Payload too short for the fixed width requested by an accessor."""

    def __init__(self, tag: int, expected: int, actual: int) -> None:
        super().__init__(
            f"Payload for tag {tag:#010x} is {actual} bytes, need {expected}"
        )
        self.tag = tag
        self.expected = expected
        self.actual = actual


class EncodeError(TlvError):
    """Caller error while storing a value (bad tag, value out of range)."""


class PayloadTooLargeError(EncodeError):
    """Payload length does not fit the 32-bit length field."""

    def __init__(self, tag: int, length: int) -> None:
        super().__init__(f"Payload for tag {tag:#010x} too large: {length} bytes")
        self.tag = tag
        self.length = length

"""Decode limits applied to untrusted TLV input."""

from __future__ import annotations

from dataclasses import dataclass

MAX_DEPTH = 32
MAX_SIZE = 16 * 1024 * 1024  # 16 MB
MAX_ENTRIES = 65_535

# Largest value the u32 length field can carry
_U32_MAX = 0xFFFFFFFF


@dataclass(slots=True)
class DecodeLimits:
    """Ceilings checked by every decode.

    ``max_depth`` bounds box nesting (a top-level box is depth 0),
    ``max_size`` the byte length of one decode's input slice and
    ``max_entries`` the number of records one decode accepts.
    """

    max_depth: int = MAX_DEPTH
    max_size: int = MAX_SIZE
    max_entries: int = MAX_ENTRIES

    @classmethod
    def unbounded(cls) -> DecodeLimits:
        """Limits wide enough for any buffer the wire format can describe.

        Only suitable for trusted input.
        """
        return cls(max_depth=_U32_MAX, max_size=2**63 - 1, max_entries=2**63 - 1)

    def with_max_depth(self, depth: int) -> DecodeLimits:
        self.max_depth = depth
        return self

    def with_max_size(self, size: int) -> DecodeLimits:
        self.max_size = size
        return self

    def with_max_entries(self, n: int) -> DecodeLimits:
        self.max_entries = n
        return self


# Boxes built without explicit limits take their own copy of these values
DEFAULT_LIMITS = DecodeLimits()

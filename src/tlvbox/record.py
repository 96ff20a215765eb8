"""Read-only record view over a TlvBox.

Repeated structures have no dedicated wire type. They are laid out on a
contiguous, ascending run of tags starting at a range's first tag; a reader
walks the range and stops at the first tag that is not set. Anything after
that gap is ignored, so a list with a hole at ``start + 2`` ends there even
if ``start + 3`` is present. Producers depend on this layout, so sparse
lists are deliberately unsupported.

Two kinds of repeated structure are used:

- fixed tuples of little-endian integers (rectangles, ``x, y, w, h``)
- nested records, each payload a complete encoded box that is parsed
  recursively into another :class:`RecordView`
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Iterator
from dataclasses import dataclass

import crc32c

from tlvbox.config import DecodeLimits
from tlvbox.container import TlvBox
from tlvbox.errors import MalformedPayloadError
from tlvbox.tags import Tag
from tlvbox.tlv import Buffer

log = logging.getLogger("tlvbox.record")

_RECT_FMT = struct.Struct("<iiii")


# ---------------------------------------------------------------------------
# Gap-stop scans
# ---------------------------------------------------------------------------


def scan_payloads(box: TlvBox, start: int, end: int) -> Iterator[tuple[int, bytes]]:
    """Yield ``(tag, payload)`` for ``start, start + 1, ...`` up to the first gap.

    Never looks past ``end`` (exclusive).
    """
    tag = start
    while tag < end:
        payload = box.get_bytes(tag)
        if payload is None:
            break
        yield tag, payload
        tag += 1
    log.debug("Scan of [%#x, %#x) stopped at %#x", start, end, tag)


def scan_tuples(
    box: TlvBox, start: int, end: int, fmt: struct.Struct
) -> Iterator[tuple]:
    """Unpack each payload of a gap-stop scan with ``fmt``.

    Only the leading ``fmt.size`` bytes of a payload are read.

    Raises:
        tlvbox.errors.MalformedPayloadError: on a payload shorter than
            ``fmt.size``.
    """
    for tag, payload in scan_payloads(box, start, end):
        if len(payload) < fmt.size:
            raise MalformedPayloadError(tag, fmt.size, len(payload))
        yield fmt.unpack_from(payload)


@dataclass(frozen=True, slots=True)
class Rect:
    """Detection rectangle in pixels."""

    x: int
    y: int
    w: int
    h: int

    def encode(self) -> bytes:
        """Encode as four little-endian int32 (16 bytes)."""
        return _RECT_FMT.pack(self.x, self.y, self.w, self.h)

    @classmethod
    def decode(cls, payload: bytes, tag: int = Tag.RECT_START) -> Rect:
        """Decode the leading 16 bytes of ``payload``.

        Raises:
            tlvbox.errors.MalformedPayloadError: on a payload shorter than
                16 bytes; ``tag`` names the record in the error.
        """
        if len(payload) < _RECT_FMT.size:
            raise MalformedPayloadError(tag, _RECT_FMT.size, len(payload))
        return cls(*_RECT_FMT.unpack_from(payload))


# ---------------------------------------------------------------------------
# Record view
# ---------------------------------------------------------------------------


class RecordView:
    """Picture / AI-detection fields interpreted from one TlvBox.

    Scalar fields are None when their tag is not set. The view never
    modifies the wrapped box.
    """

    def __init__(self, box: TlvBox) -> None:
        self._box = box

    @classmethod
    def parse(
        cls,
        buffer: Buffer,
        offset: int = 0,
        *,
        limits: DecodeLimits | None = None,
        depth: int = 0,
    ) -> RecordView:
        """Decode ``buffer[offset:]`` and wrap the result.

        Raises:
            tlvbox.errors.DecodeError: on malformed or over-limit input.
        """
        return cls(TlvBox.from_bytes(buffer, offset, limits=limits, depth=depth))

    @property
    def box(self) -> TlvBox:
        return self._box

    # ----- scalar fields -----

    @property
    def pic_data(self) -> bytes | None:
        return self._box.get_bytes(Tag.PIC_DATA)

    @property
    def pixel_format(self) -> str | None:
        return self._box.get_string(Tag.PIXEL_FMT)

    @property
    def pic_time(self) -> str | None:
        return self._box.get_string(Tag.PIC_TIME)

    @property
    def play_url(self) -> str | None:
        return self._box.get_string(Tag.PLAY_URL)

    @property
    def play_alias(self) -> str | None:
        return self._box.get_string(Tag.PLAY_ALIAS)

    @property
    def play_channel(self) -> int | None:
        return self._box.get_int(Tag.PLAY_CHANNEL)

    @property
    def person_name(self) -> str | None:
        return self._box.get_string(Tag.PERSON_NAME)

    @property
    def person_id(self) -> str | None:
        return self._box.get_string(Tag.PERSON_ID)

    @property
    def person_score(self) -> int | None:
        return self._box.get_int(Tag.PERSON_SCORE)

    # ----- repeated structures -----

    def iter_rects(self) -> Iterator[Rect]:
        """Lazily yield rectangles from ``RECT_START`` up to the first gap."""
        for tag, payload in scan_payloads(self._box, Tag.RECT_START, Tag.RECT_END):
            yield Rect.decode(payload, tag)

    def rects(self) -> list[Rect]:
        return list(self.iter_rects())

    def iter_face_recogs(self) -> Iterator[RecordView]:
        """Lazily parse nested face-recognition records up to the first gap.

        A present payload that fails to decode raises its DecodeError; it
        does not end the scan as a gap would.
        """
        box = self._box
        for _tag, payload in scan_payloads(box, Tag.FACE_RECOG_START, Tag.FACE_RECOG_END):
            yield RecordView.parse(payload, limits=box.limits, depth=box.depth + 1)

    def face_recogs(self) -> list[RecordView]:
        return list(self.iter_face_recogs())

    # ----- diagnostics -----

    def dump(self, indent: str = "") -> str:
        """Render every field as indented text, recursing into nested records."""
        lines: list[str] = []

        data = self.pic_data
        if data is None:
            lines.append(f"{indent}pic_data: <absent>")
        else:
            lines.append(
                f"{indent}pic_data: {len(data)} bytes (crc32c {crc32c.crc32c(data):#010x})"
            )

        for name in (
            "pixel_format",
            "pic_time",
            "play_url",
            "play_alias",
            "play_channel",
            "person_name",
            "person_id",
            "person_score",
        ):
            value = getattr(self, name)
            lines.append(f"{indent}{name}: {'<absent>' if value is None else value}")

        rects = self.rects()
        if not rects:
            lines.append(f"{indent}rects: <empty>")
        else:
            lines.append(f"{indent}rects:")
            for r in rects:
                lines.append(f"{indent}  - x={r.x}, y={r.y}, w={r.w}, h={r.h}")

        children = self.face_recogs()
        if not children:
            lines.append(f"{indent}face_recogs: <empty>")
            return "\n".join(lines) + "\n"

        lines.append(f"{indent}face_recogs:")
        out = "\n".join(lines) + "\n"
        for child in children:
            out += child.dump(indent + "    ")
        return out

    def __repr__(self) -> str:
        return f"RecordView({self._box!r})"

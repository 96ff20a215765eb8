"""Tag assignments for picture and AI-detection records.

These values are shared with existing producers and must stay bit-exact.
The ``*_START``/``*_END`` pairs are half-open ranges holding repeated
entries, one tag per element, contiguous from ``*_START``.
"""

from __future__ import annotations

from enum import IntEnum


class Tag(IntEnum):
    """Record field tags."""

    PIC_DATA = 0x00000001  # picture bytes
    PIXEL_FMT = 0x00000002  # jpeg/rgb/rgba/nv12
    PIC_TIME = 0x00000003  # "YYYY-MM-DD hh:mm:ss"
    PLAY_URL = 0x00000004
    PLAY_ALIAS = 0x00000005
    PLAY_CHANNEL = 0x00000006  # int32

    PERSON_NAME = 0x00000010
    PERSON_ID = 0x00000011
    PERSON_SCORE = 0x00000012  # int32 match score

    # rectangles, four int32 each (x, y, w, h)
    RECT_START = 0x00001000
    RECT_END = 0x00002000

    # face recognition results, each an encoded TlvBox
    FACE_RECOG_START = 0x00002001
    FACE_RECOG_END = 0x00003000

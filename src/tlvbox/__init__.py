"""tlvbox — Type-Length-Value containers with typed accessors.

A box is a flat mapping from 32-bit tags to opaque payloads, serialized as
concatenated little-endian ``[type u32][length u32][payload]`` records.
Typed get/put pairs read and write integers, floats, UTF-8 strings and
nested boxes; contiguous tag ranges carry lists of fixed tuples and lists
of nested records.

Example usage::

    from tlvbox import RecordView, Rect, Tag, TlvBox

    face = TlvBox().put_string(Tag.PERSON_NAME, "alice").put_int(Tag.PERSON_SCORE, 87)

    box = TlvBox()
    box.put_string(Tag.PIXEL_FMT, "jpeg")
    box.put_bytes(Tag.RECT_START, Rect(10, 20, 64, 64).encode())
    box.put_box(Tag.FACE_RECOG_START, face)

    view = RecordView.parse(box.encode())
    print(view.pixel_format, view.rects())
    for child in view.face_recogs():
        print(child.person_name, child.person_score)
    print(view.dump())
"""

from tlvbox.config import DecodeLimits
from tlvbox.container import TlvBox
from tlvbox.errors import (
    DecodeError,
    EncodeError,
    LimitExceededError,
    MalformedPayloadError,
    PayloadTooLargeError,
    TlvError,
    TruncatedError,
)
from tlvbox.record import Rect, RecordView, scan_payloads, scan_tuples
from tlvbox.tags import Tag
from tlvbox.tlv import TlvRecord, decode_records, encode_records, iter_records

__version__ = "0.1.0"

__all__ = [
    # TLV
    "TlvRecord",
    "encode_records",
    "decode_records",
    "iter_records",
    # Container
    "TlvBox",
    # Record view
    "RecordView",
    "Rect",
    "scan_payloads",
    "scan_tuples",
    "Tag",
    # Errors
    "TlvError",
    "DecodeError",
    "TruncatedError",
    "LimitExceededError",
    "MalformedPayloadError",
    "EncodeError",
    "PayloadTooLargeError",
    # Config
    "DecodeLimits",
]

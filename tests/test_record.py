"""Tests for RecordView fields, gap-stop scans and nested records."""

import struct

import crc32c
import pytest

from tlvbox.config import DecodeLimits
from tlvbox.container import TlvBox
from tlvbox.errors import LimitExceededError, MalformedPayloadError, TruncatedError
from tlvbox.record import Rect, RecordView, scan_payloads, scan_tuples
from tlvbox.tags import Tag


def _view(box: TlvBox) -> RecordView:
    return RecordView.parse(box.encode())


class TestTags:
    """Tag values are shared with existing producers."""

    @pytest.mark.parametrize(
        "tag, value",
        [
            (Tag.PIC_DATA, 0x01),
            (Tag.PIXEL_FMT, 0x02),
            (Tag.PIC_TIME, 0x03),
            (Tag.PLAY_URL, 0x04),
            (Tag.PLAY_ALIAS, 0x05),
            (Tag.PLAY_CHANNEL, 0x06),
            (Tag.PERSON_NAME, 0x10),
            (Tag.PERSON_ID, 0x11),
            (Tag.PERSON_SCORE, 0x12),
            (Tag.RECT_START, 0x1000),
            (Tag.RECT_END, 0x2000),
            (Tag.FACE_RECOG_START, 0x2001),
            (Tag.FACE_RECOG_END, 0x3000),
        ],
    )
    def test_values(self, tag, value):
        assert tag == value


class TestScalarFields:
    """Scalar properties pass through to typed accessors."""

    def test_all_fields(self):
        box = (
            TlvBox()
            .put_bytes(Tag.PIC_DATA, b"\xff\xd8\xff")
            .put_string(Tag.PIXEL_FMT, "jpeg")
            .put_string(Tag.PIC_TIME, "2024-01-02 03:04:05")
            .put_string(Tag.PLAY_URL, "rtsp://10.0.0.9/live")
            .put_string(Tag.PLAY_ALIAS, "front door")
            .put_int(Tag.PLAY_CHANNEL, 3)
            .put_string(Tag.PERSON_NAME, "alice")
            .put_string(Tag.PERSON_ID, "p-0042")
            .put_int(Tag.PERSON_SCORE, 87)
        )
        view = _view(box)

        assert view.pic_data == b"\xff\xd8\xff"
        assert view.pixel_format == "jpeg"
        assert view.pic_time == "2024-01-02 03:04:05"
        assert view.play_url == "rtsp://10.0.0.9/live"
        assert view.play_alias == "front door"
        assert view.play_channel == 3
        assert view.person_name == "alice"
        assert view.person_id == "p-0042"
        assert view.person_score == 87

    def test_unset_fields_are_none(self):
        view = RecordView(TlvBox())
        assert view.pic_data is None
        assert view.pixel_format is None
        assert view.play_channel is None
        assert view.person_score is None

    def test_parse_with_offset(self):
        data = b"\x00\x00" + TlvBox().put_string(Tag.PERSON_NAME, "bob").encode()
        assert RecordView.parse(data, 2).person_name == "bob"

    def test_wraps_existing_box(self):
        box = TlvBox().put_int(Tag.PLAY_CHANNEL, 1)
        view = RecordView(box)
        assert view.box is box
        assert view.play_channel == 1

    def test_truncated_input_raises(self):
        data = TlvBox().put_string(Tag.PERSON_NAME, "bob").encode()[:-1]
        with pytest.raises(TruncatedError):
            RecordView.parse(data)


class TestRects:
    """Rectangle list over [0x1000, 0x2000)."""

    def test_rect_encoding(self):
        assert Rect(1, 2, 3, 4).encode() == struct.pack("<iiii", 1, 2, 3, 4)

    def test_rect_decode(self):
        assert Rect.decode(Rect(1, -2, 3, 4).encode()) == Rect(1, -2, 3, 4)
        assert Rect.decode(Rect(5, 6, 7, 8).encode() + b"\x00\x00") == Rect(5, 6, 7, 8)

    def test_rect_decode_short(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            Rect.decode(b"\x00" * 15, 0x1003)
        assert exc_info.value.tag == 0x1003
        assert exc_info.value.expected == 16
        assert exc_info.value.actual == 15

    def test_rect_decode_short_default_tag(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            Rect.decode(b"")
        assert exc_info.value.tag == Tag.RECT_START

    def test_contiguous(self):
        box = TlvBox()
        for i in range(3):
            box.put_bytes(Tag.RECT_START + i, Rect(i, i + 1, 10, -20).encode())
        rects = _view(box).rects()
        assert rects == [Rect(0, 1, 10, -20), Rect(1, 2, 10, -20), Rect(2, 3, 10, -20)]

    def test_gap_stops_scan(self):
        box = (
            TlvBox()
            .put_bytes(0x1000, Rect(1, 1, 1, 1).encode())
            .put_bytes(0x1002, Rect(3, 3, 3, 3).encode())
        )
        assert _view(box).rects() == [Rect(1, 1, 1, 1)]

    def test_empty(self):
        box = TlvBox().put_bytes(0x1001, Rect(1, 1, 1, 1).encode())
        assert _view(box).rects() == []
        assert RecordView(TlvBox()).rects() == []

    def test_restartable(self):
        box = TlvBox().put_bytes(0x1000, Rect(5, 6, 7, 8).encode())
        view = _view(box)
        assert list(view.iter_rects()) == list(view.iter_rects()) == [Rect(5, 6, 7, 8)]

    def test_longer_payload_reads_leading_bytes(self):
        box = TlvBox().put_bytes(0x1000, Rect(1, 2, 3, 4).encode() + b"extra")
        assert _view(box).rects() == [Rect(1, 2, 3, 4)]

    def test_short_payload_raises(self):
        box = TlvBox().put_bytes(0x1000, b"\x00" * 12)
        with pytest.raises(MalformedPayloadError) as exc_info:
            _view(box).rects()
        assert exc_info.value.tag == 0x1000
        assert exc_info.value.expected == 16

    def test_stops_at_range_end(self):
        box = TlvBox().put_bytes(0x1FFF, Rect(0, 0, 0, 0).encode())
        box.put_bytes(0x2000, Rect(9, 9, 9, 9).encode())
        # 0x2000 sits outside the range even though it holds a rect payload
        tuples = list(scan_tuples(box, 0x1FFF, Tag.RECT_END, struct.Struct("<iiii")))
        assert tuples == [(0, 0, 0, 0)]


class TestGenericScans:
    """scan_payloads / scan_tuples work with any range."""

    def test_scan_payloads(self):
        box = TlvBox().put_bytes(5, b"a").put_bytes(6, b"b").put_bytes(7, b"c")
        assert list(scan_payloads(box, 5, 7)) == [(5, b"a"), (6, b"b")]

    def test_scan_payloads_empty_range(self):
        box = TlvBox().put_bytes(5, b"a")
        assert list(scan_payloads(box, 5, 5)) == []

    def test_scan_tuples_custom_format(self):
        box = TlvBox().put_bytes(0x100, struct.pack("<hh", 1, -1))
        assert list(scan_tuples(box, 0x100, 0x200, struct.Struct("<hh"))) == [(1, -1)]


class TestFaceRecogs:
    """Nested records over [0x2001, 0x3000)."""

    def test_single_child(self):
        child = TlvBox().put_string(Tag.PERSON_ID, "p-7")
        box = TlvBox().put_box(0x2001, child)

        children = _view(box).face_recogs()
        assert len(children) == 1
        assert children[0].person_id == "p-7"
        assert children[0].box.depth == 1

    def test_gap_stops_scan(self):
        box = (
            TlvBox()
            .put_box(0x2001, TlvBox().put_string(Tag.PERSON_NAME, "a"))
            .put_box(0x2002, TlvBox().put_string(Tag.PERSON_NAME, "b"))
            .put_box(0x2004, TlvBox().put_string(Tag.PERSON_NAME, "d"))
        )
        names = [c.person_name for c in _view(box).face_recogs()]
        assert names == ["a", "b"]

    def test_none_present(self):
        box = TlvBox().put_box(0x2000, TlvBox())
        assert _view(box).face_recogs() == []

    def test_recursive_structure(self):
        grandchild = TlvBox().put_string(Tag.PERSON_NAME, "carol")
        child = (
            TlvBox()
            .put_string(Tag.PERSON_NAME, "bob")
            .put_int(Tag.PERSON_SCORE, 55)
            .put_bytes(Tag.RECT_START, Rect(1, 2, 3, 4).encode())
            .put_box(Tag.FACE_RECOG_START, grandchild)
        )
        box = TlvBox().put_string(Tag.PIXEL_FMT, "nv12").put_box(Tag.FACE_RECOG_START, child)

        (c,) = _view(box).face_recogs()
        assert c.person_name == "bob"
        assert c.person_score == 55
        assert c.rects() == [Rect(1, 2, 3, 4)]
        (g,) = c.face_recogs()
        assert g.person_name == "carol"
        assert g.box.depth == 2
        assert g.face_recogs() == []

    def test_undecodable_child_raises(self):
        box = TlvBox().put_bytes(0x2001, b"\x11\x00\x00\x00\x09\x00\x00\x00abc")
        with pytest.raises(TruncatedError):
            _view(box).face_recogs()

    def test_depth_limit(self):
        box = TlvBox().put_string(Tag.PERSON_NAME, "leaf")
        for _ in range(4):
            box = TlvBox().put_box(Tag.FACE_RECOG_START, box)

        view = RecordView.parse(box.encode(), limits=DecodeLimits(max_depth=3))
        level3 = view.face_recogs()[0].face_recogs()[0].face_recogs()[0]
        with pytest.raises(LimitExceededError) as exc_info:
            level3.face_recogs()
        assert exc_info.value.limit == "depth"


class TestDump:
    """Diagnostic rendering."""

    def test_empty_view(self):
        assert RecordView(TlvBox()).dump() == (
            "pic_data: <absent>\n"
            "pixel_format: <absent>\n"
            "pic_time: <absent>\n"
            "play_url: <absent>\n"
            "play_alias: <absent>\n"
            "play_channel: <absent>\n"
            "person_name: <absent>\n"
            "person_id: <absent>\n"
            "person_score: <absent>\n"
            "rects: <empty>\n"
            "face_recogs: <empty>\n"
        )

    def test_fields_rects_and_children(self):
        child = TlvBox().put_string(Tag.PERSON_NAME, "alice")
        box = (
            TlvBox()
            .put_bytes(Tag.PIC_DATA, b"abc")
            .put_string(Tag.PIXEL_FMT, "jpeg")
            .put_int(Tag.PLAY_CHANNEL, 2)
            .put_bytes(Tag.RECT_START, Rect(1, 2, 3, 4).encode())
            .put_box(Tag.FACE_RECOG_START, child)
        )
        lines = _view(box).dump().splitlines()

        assert lines[0] == f"pic_data: 3 bytes (crc32c {crc32c.crc32c(b'abc'):#010x})"
        assert "pixel_format: jpeg" in lines
        assert "play_channel: 2" in lines
        assert lines[lines.index("rects:") + 1] == "  - x=1, y=2, w=3, h=4"
        nested = lines[lines.index("face_recogs:") + 1 :]
        assert "    person_name: alice" in nested
        assert nested[-1] == "    face_recogs: <empty>"
        assert all(line.startswith("    ") for line in nested)

    def test_indent(self):
        out = RecordView(TlvBox()).dump("  ")
        assert all(line.startswith("  ") for line in out.splitlines())

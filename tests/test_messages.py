import io
import struct
from dataclasses import dataclass, field

import pytest

from mediadrivers.vnc.encoding import CursorEncoding, RawEncoding, ZlibEncoding
from mediadrivers.vnc.messages import (
    BellMessage,
    FramebufferUpdateMessage,
    ServerCutTextMessage,
    SetColorMapEntriesMessage,
)
from mediadrivers.vnc.pixels import Color, PixelFormat

RGB32 = PixelFormat(
    bpp=32, depth=24, big_endian=False, true_color=True,
    red_max=255, green_max=255, blue_max=255,
    red_shift=16, green_shift=8, blue_shift=0,
)


@dataclass
class FakeConn:
    pixel_format: PixelFormat = RGB32
    color_map: list = field(default_factory=lambda: [Color()] * 256)
    encodings: list = field(default_factory=list)


def _update(*rects: bytes) -> bytes:
    return b"\x00" + struct.pack(">H", len(rects)) + b"".join(rects)


def test_framebuffer_update_raw_rectangle():
    data = _update(struct.pack(">HHHHi", 1, 2, 1, 1, 0) + bytes([0x33, 0x22, 0x11, 0x00]))
    msg = FramebufferUpdateMessage.read(FakeConn(), io.BytesIO(data))
    assert len(msg.rectangles) == 1
    rect = msg.rectangles[0]
    assert (rect.x, rect.y, rect.width, rect.height) == (1, 2, 1, 1)
    assert isinstance(rect.enc, RawEncoding)
    assert rect.enc.colors == [Color(0x11, 0x22, 0x33)]


def test_framebuffer_update_unsupported_encoding():
    data = _update(struct.pack(">HHHHi", 0, 0, 1, 1, 99))
    with pytest.raises(ValueError, match="unsupported encoding type: 99"):
        FramebufferUpdateMessage.read(FakeConn(), io.BytesIO(data))


def test_framebuffer_update_uses_connection_encodings():
    conn = FakeConn(encodings=[CursorEncoding()])
    stream = io.BytesIO(_update(struct.pack(">HHHHi", 0, 0, 1, 1, -239) + bytes(4) + bytes(1)) + b"X")
    msg = FramebufferUpdateMessage.read(conn, stream)
    assert isinstance(msg.rectangles[0].enc, CursorEncoding)
    assert stream.read() == b"X"


def test_framebuffer_update_zlib_matches_raw():
    import zlib

    pixel = bytes([0x33, 0x22, 0x11, 0x00])
    compressed = zlib.compress(pixel)
    zlib_rect = struct.pack(">HHHHi", 0, 0, 1, 1, 6) + struct.pack(">I", len(compressed)) + compressed
    raw_rect = struct.pack(">HHHHi", 0, 0, 1, 1, 0) + pixel
    conn = FakeConn(encodings=[ZlibEncoding()])
    msg = FramebufferUpdateMessage.read(conn, io.BytesIO(_update(zlib_rect, raw_rect)))
    first, second = msg.rectangles
    assert isinstance(first.enc, ZlibEncoding)
    assert first.enc.raw_pixel == second.enc.raw_pixel


def test_framebuffer_update_empty():
    msg = FramebufferUpdateMessage.read(FakeConn(), io.BytesIO(_update()))
    assert msg.rectangles == []


def test_set_colour_map_entries_updates_connection():
    conn = FakeConn()
    data = (
        b"\x00" + struct.pack(">HH", 10, 2)
        + struct.pack(">HHH", 1, 2, 3) + struct.pack(">HHH", 4, 5, 6)
    )
    msg = SetColorMapEntriesMessage.read(conn, io.BytesIO(data))
    assert msg.first_color == 10
    assert msg.colors == [Color(1, 2, 3), Color(4, 5, 6)]
    assert conn.color_map[10] == Color(1, 2, 3)
    assert conn.color_map[11] == Color(4, 5, 6)


def test_set_colour_map_entries_out_of_range():
    data = b"\x00" + struct.pack(">HH", 255, 2) + struct.pack(">HHH", 1, 1, 1) * 2
    with pytest.raises(ValueError):
        SetColorMapEntriesMessage.read(FakeConn(), io.BytesIO(data))


def test_bell_reads_nothing():
    stream = io.BytesIO(b"next")
    assert BellMessage.read(FakeConn(), stream) == BellMessage()
    assert stream.read() == b"next"


def test_server_cut_text():
    data = bytes(3) + struct.pack(">I", 5) + b"hello"
    assert ServerCutTextMessage.read(FakeConn(), io.BytesIO(data)).text == "hello"


def test_server_cut_text_latin1():
    data = bytes(3) + struct.pack(">I", 1) + b"\xe9"
    assert ServerCutTextMessage.read(FakeConn(), io.BytesIO(data)).text == "\u00e9"


def test_server_cut_text_truncated():
    data = bytes(3) + struct.pack(">I", 10) + b"abc"
    with pytest.raises(EOFError):
        ServerCutTextMessage.read(FakeConn(), io.BytesIO(data))
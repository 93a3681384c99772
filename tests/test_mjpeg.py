import io

import pytest
from PIL import Image

from mediadrivers.frame.images import FrameError
from mediadrivers.frame.mjpeg import (
    HUFFMAN_TABLE_INFO_LENGTH,
    add_motion_dht,
    decode_mjpeg,
)

SOS = b"\xff\xda"
DHT = b"\xff\xc4"


def _jpeg_bytes(width=16, height=16):
    img = Image.new("RGB", (width, height))
    for x in range(width):
        for y in range(height):
            img.putpixel((x, y), (x * 15 % 256, y * 15 % 256, (x + y) * 7 % 256))
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=90)
    return buf.getvalue()


def _strip_huffman_tables(data):
    assert data[:2] == b"\xff\xd8"
    out = bytearray(data[:2])
    pos = 2
    while data[pos:pos + 2] != SOS:
        marker = data[pos:pos + 2]
        length = int.from_bytes(data[pos + 2:pos + 4], "big")
        if marker != DHT:
            out += data[pos:pos + 2 + length]
        pos += 2 + length
    out += data[pos:]
    return bytes(out)


def test_add_motion_dht_inserts_tables_before_scan():
    stripped = _strip_huffman_tables(_jpeg_bytes())
    assert DHT not in stripped
    corrected = add_motion_dht(stripped)
    assert len(corrected) == len(stripped) + HUFFMAN_TABLE_INFO_LENGTH
    assert corrected.index(DHT) < corrected.index(SOS)


def test_add_motion_dht_makes_frame_decodable_to_same_pixels():
    original = _jpeg_bytes()
    corrected = add_motion_dht(_strip_huffman_tables(original))
    expected = Image.open(io.BytesIO(original))
    got = Image.open(io.BytesIO(corrected))
    assert got.size == expected.size
    assert got.tobytes() == expected.tobytes()


def test_add_motion_dht_leaves_random_bytes_unchanged():
    random_bytes = bytes([1, 2, 3, 4])
    assert add_motion_dht(random_bytes) == random_bytes


def test_add_motion_dht_leaves_multiple_scans_unchanged():
    data = b"\x00" + SOS + b"\x01" + SOS + b"\x02"
    assert add_motion_dht(data) == data


def test_decode_mjpeg_without_huffman_tables():
    original = _jpeg_bytes()
    img = decode_mjpeg(_strip_huffman_tables(original), 16, 16)
    expected = Image.open(io.BytesIO(original))
    assert img.size == (16, 16)
    assert img.tobytes() == expected.tobytes()


def test_decode_mjpeg_plain_jpeg():
    img = decode_mjpeg(_jpeg_bytes(8, 4), 8, 4)
    assert img.size == (8, 4)


def test_decode_mjpeg_random_bytes_raise():
    with pytest.raises(FrameError):
        decode_mjpeg(bytes([1, 2, 3, 4]), 640, 480)
"""Decoder for Motion-JPEG frames, which often omit their Huffman tables."""

from __future__ import annotations

import io

from PIL import Image

from mediadrivers.frame.images import FrameError

_DHT_MARKER = bytes([255, 196])
_DHT = bytes([
    1, 162, 0, 0, 1, 5, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11,
    1, 0, 3, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11,
    16, 0, 2, 1, 3, 3, 2, 4, 3, 5, 5, 4, 4, 0, 0, 1, 125, 1, 2, 3, 0, 4, 17, 5, 18, 33, 49, 65, 6,
    19, 81, 97, 7, 34, 113, 20, 50, 129, 145, 161, 8, 35, 66, 177, 193, 21, 82, 209, 240, 36, 51,
    98, 114, 130, 9, 10, 22, 23, 24, 25, 26, 37, 38, 39, 40, 41, 42, 52, 53, 54, 55, 56, 57, 58,
    67, 68, 69, 70, 71, 72, 73, 74, 83, 84, 85, 86, 87, 88, 89, 90, 99, 100, 101, 102, 103, 104,
    105, 106, 115, 116, 117, 118, 119, 120, 121, 122, 131, 132, 133, 134, 135, 136, 137, 138, 146,
    147, 148, 149, 150, 151, 152, 153, 154, 162, 163, 164, 165, 166, 167, 168, 169, 170, 178, 179,
    180, 181, 182, 183, 184, 185, 186, 194, 195, 196, 197, 198, 199, 200, 201, 202, 210, 211, 212,
    213, 214, 215, 216, 217, 218, 225, 226, 227, 228, 229, 230, 231, 232, 233, 234, 241, 242, 243,
    244, 245, 246, 247, 248, 249, 250,
    17, 0, 2, 1, 2, 4, 4, 3, 4, 7, 5, 4, 4, 0, 1, 2, 119, 0, 1, 2, 3, 17, 4, 5, 33, 49, 6, 18, 65,
    81, 7, 97, 113, 19, 34, 50, 129, 8, 20, 66, 145, 161, 177, 193, 9, 35, 51, 82, 240, 21, 98,
    114, 209, 10, 22, 36, 52, 225, 37, 241, 23, 24, 25, 26, 38, 39, 40, 41, 42, 53, 54, 55, 56, 57,
    58, 67, 68, 69, 70, 71, 72, 73, 74, 83, 84, 85, 86, 87, 88, 89, 90, 99, 100, 101, 102, 103,
    104, 105, 106, 115, 116, 117, 118, 119, 120, 121, 122, 130, 131, 132, 133, 134, 135, 136, 137,
    138, 146, 147, 148, 149, 150, 151, 152, 153, 154, 162, 163, 164, 165, 166, 167, 168, 169, 170,
    178, 179, 180, 181, 182, 183, 184, 185, 186, 194, 195, 196, 197, 198, 199, 200, 201, 202, 210,
    211, 212, 213, 214, 215, 216, 217, 218, 226, 227, 228, 229, 230, 231, 232, 233, 234, 242, 243,
    244, 245, 246, 247, 248, 249, 250,
])
_SOS_MARKER = bytes([255, 218])
HUFFMAN_TABLE_INFO_LENGTH = len(_DHT_MARKER) + len(_DHT) + len(_SOS_MARKER)


def add_motion_dht(frame: bytes) -> bytes:
    """Insert the standard Motion-JPEG Huffman tables before the start-of-scan marker.

    Frames that do not hold exactly one start-of-scan marker are returned unchanged.
    """
    data = bytes(frame)
    parts = data.split(_SOS_MARKER)
    if len(parts) != 2:
        return data
    head, tail = parts
    return head + _DHT_MARKER + _DHT + _SOS_MARKER + tail


def _decode_jpeg(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def decode_mjpeg(frame: bytes, width: int, height: int) -> Image.Image:
    """Decode a JPEG frame, adding default Huffman tables if the first attempt fails."""
    data = bytes(frame)
    try:
        return _decode_jpeg(data)
    except Exception as first_error:
        corrected = add_motion_dht(data)
        if corrected == data:
            raise FrameError(f"invalid JPEG frame: {first_error}") from first_error
        try:
            return _decode_jpeg(corrected)
        except Exception as err:
            raise FrameError(f"invalid JPEG frame: {err}") from err
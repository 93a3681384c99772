"""Decoder for 16-bit little-endian depth frames."""

from __future__ import annotations

from mediadrivers.frame.images import FrameError, Gray16Image


def decode_z16(frame: bytes, width: int, height: int) -> Gray16Image:
    """Decode rows of little-endian 16-bit depth samples into a grayscale image."""
    data = bytes(frame)
    expected = 2 * (width * height)
    if len(data) != expected:
        raise FrameError(f"frame length ({len(data)}) not expected size ({expected})")
    pix = bytearray(expected)
    pix[0::2] = data[1::2]
    pix[1::2] = data[0::2]
    return Gray16Image(width, height, pix=pix, stride=width * 2)
"""Rectangle encodings of framebuffer updates."""

from __future__ import annotations

import struct
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, BinaryIO, ClassVar, Protocol, Sequence

from mediadrivers.vnc.pixels import Color, PixelFormat, read_exact


class _Connection(Protocol):
    pixel_format: PixelFormat
    color_map: Sequence[Color]


@dataclass
class Rectangle:
    """A rectangle of pixel data in a framebuffer update."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0
    enc: Encoding | None = None


class Encoding(ABC):
    """A way of encoding pixel data sent by the server."""

    encoding_type: ClassVar[int]

    @abstractmethod
    def read(self, conn: _Connection, rect: Rectangle, stream: BinaryIO) -> Encoding:
        """Read the encoded data of *rect* and return an encoding holding it."""


def _pixel_values(pf: PixelFormat, data: bytes, count: int) -> list[int]:
    if pf.bpp not in (8, 16, 32):
        # Other depths carry no value the decoder understands.
        return [0] * count
    step = pf.bpp // 8
    order = "big" if pf.big_endian else "little"
    return [int.from_bytes(data[i:i + step], order) for i in range(0, count * step, step)]


def _to_color(pf: PixelFormat, raw: int, color_map: Sequence[Color]) -> Color:
    if not pf.true_color:
        if not 0 <= raw < len(color_map):
            raise ValueError(f"colour map index {raw} out of range")
        return color_map[raw]
    r = (raw >> pf.red_shift) & pf.red_max & 0xFFFF
    g = (raw >> pf.green_shift) & pf.green_max & 0xFFFF
    b = (raw >> pf.blue_shift) & pf.blue_max & 0xFFFF
    if pf.bpp == 16:
        b = ((b << 3) | (b >> 2)) & 0xFFFF
        g = ((g << 2) | (g >> 2)) & 0xFFFF
        r = ((r << 3) | (r >> 2)) & 0xFFFF
    return Color(r, g, b)


def _decode_pixels(conn: _Connection, data: bytes, count: int) -> tuple[list[Color], list[int]]:
    pf = conn.pixel_format
    colors = [_to_color(pf, raw, conn.color_map) for raw in _pixel_values(pf, data, count)]
    rgba = [(0xFF << 24 | c.b << 16 | c.g << 8 | c.r) & 0xFFFFFFFF for c in colors]
    return colors, rgba


@dataclass
class CursorEncoding(Encoding):
    """Cursor shape pseudo-encoding; the data is read and discarded."""

    encoding_type: ClassVar[int] = -239

    def read(self, conn: _Connection, rect: Rectangle, stream: BinaryIO) -> CursorEncoding:
        read_exact(stream, rect.height * rect.width * conn.pixel_format.bpp // 8)
        read_exact(stream, ((rect.width + 7) // 8) * rect.height)
        return CursorEncoding()


@dataclass
class RawEncoding(Encoding):
    """Uncompressed pixels; ``raw_pixel`` holds packed little-endian RGBA values."""

    encoding_type: ClassVar[int] = 0

    colors: list[Color] = field(default_factory=list)
    raw_pixel: list[int] = field(default_factory=list)

    def read(self, conn: _Connection, rect: Rectangle, stream: BinaryIO) -> RawEncoding:
        count = rect.width * rect.height
        data = read_exact(stream, count * (conn.pixel_format.bpp // 8))
        colors, rgba = _decode_pixels(conn, data, count)
        return RawEncoding(colors=colors, raw_pixel=rgba)


@dataclass
class ZlibEncoding(Encoding):
    """Raw pixels compressed by one zlib stream shared by all rectangles."""

    encoding_type: ClassVar[int] = 6

    colors: list[Color] = field(default_factory=list)
    raw_pixel: list[int] = field(default_factory=list)
    _inflater: Any = field(default=None, init=False, repr=False, compare=False)
    _pending: bytearray = field(default_factory=bytearray, init=False, repr=False, compare=False)

    def read(self, conn: _Connection, rect: Rectangle, stream: BinaryIO) -> ZlibEncoding:
        (length,) = struct.unpack(">I", read_exact(stream, 4))
        compressed = read_exact(stream, length)
        if self._inflater is None:
            self._inflater = zlib.decompressobj()
            self._pending = bytearray()
        try:
            self._pending += self._inflater.decompress(compressed)
        except zlib.error as err:
            raise ValueError(f"corrupt zlib data: {err}") from err

        count = rect.width * rect.height
        needed = count * (conn.pixel_format.bpp // 8)
        if len(self._pending) < needed:
            raise EOFError(
                f"zlib stream ended early: wanted {needed} bytes, got {len(self._pending)}"
            )
        data = bytes(self._pending[:needed])
        del self._pending[:needed]
        colors, rgba = _decode_pixels(conn, data, count)
        return ZlibEncoding(colors=colors, raw_pixel=rgba)

    def close(self) -> None:
        """Drop the shared zlib stream; the next read starts a new one."""
        self._inflater = None
        self._pending = bytearray()
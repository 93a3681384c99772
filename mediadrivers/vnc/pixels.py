"""Pixel layout, colour and pointer-button types of the remote framebuffer protocol."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntFlag
from typing import BinaryIO

PIXEL_FORMAT_SIZE = 16
_TRUE_COLOR_FIELDS = struct.Struct(">HHHBBB")


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly *size* bytes from *stream*; raises EOFError if it ends first."""
    if size < 0:
        raise ValueError(f"cannot read a negative number of bytes ({size})")
    buf = bytearray()
    while len(buf) < size:
        chunk = stream.read(size - len(buf))
        if not chunk:
            raise EOFError(f"unexpected end of stream: wanted {size} bytes, got {len(buf)}")
        buf += chunk
    return bytes(buf)


@dataclass(frozen=True)
class Color:
    """A single colour of a colour map, 16 bits per channel."""

    r: int = 0
    g: int = 0
    b: int = 0


class ButtonMask(IntFlag):
    """Pointer buttons; a set bit means the button is pressed."""

    LEFT = 1 << 0
    MIDDLE = 1 << 1
    RIGHT = 1 << 2
    BUTTON4 = 1 << 3
    BUTTON5 = 1 << 4
    BUTTON6 = 1 << 5
    BUTTON7 = 1 << 6
    BUTTON8 = 1 << 7


@dataclass(frozen=True)
class PixelFormat:
    """How pixel values are laid out on the wire."""

    bpp: int = 0
    depth: int = 0
    big_endian: bool = False
    true_color: bool = False
    red_max: int = 0
    green_max: int = 0
    blue_max: int = 0
    red_shift: int = 0
    green_shift: int = 0
    blue_shift: int = 0

    @classmethod
    def read(cls, stream: BinaryIO) -> PixelFormat:
        """Read the 16-byte pixel format structure from *stream*.

        The colour maxima and shifts are only taken when true colour is set.
        """
        raw = read_exact(stream, PIXEL_FORMAT_SIZE)
        true_color = raw[3] != 0
        fields: dict[str, int] = {}
        if true_color:
            (
                fields["red_max"],
                fields["green_max"],
                fields["blue_max"],
                fields["red_shift"],
                fields["green_shift"],
                fields["blue_shift"],
            ) = _TRUE_COLOR_FIELDS.unpack_from(raw, 4)
        return cls(
            bpp=raw[0],
            depth=raw[1],
            big_endian=raw[2] != 0,
            true_color=true_color,
            **fields,
        )

    def to_bytes(self) -> bytes:
        """Encode as the 16-byte wire structure, zero padded."""
        out = bytearray(PIXEL_FORMAT_SIZE)
        out[0:4] = bytes([self.bpp, self.depth, int(self.big_endian), int(self.true_color)])
        if self.true_color:
            _TRUE_COLOR_FIELDS.pack_into(
                out,
                4,
                self.red_max,
                self.green_max,
                self.blue_max,
                self.red_shift,
                self.green_shift,
                self.blue_shift,
            )
        return bytes(out)
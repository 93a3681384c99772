"""In-memory image types produced by the frame decoders."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FrameError(ValueError):
    """A raw frame could not be decoded."""


class SubsampleRatio(str, Enum):
    """Chroma subsampling ratio of a Y'CbCr image."""

    RATIO_444 = "4:4:4"
    RATIO_422 = "4:2:2"
    RATIO_420 = "4:2:0"
    RATIO_440 = "4:4:0"
    RATIO_411 = "4:1:1"
    RATIO_410 = "4:1:0"


@dataclass
class YCbCrImage:
    """Planar Y'CbCr image covering the rectangle (0, 0)-(width, height)."""

    y: bytes
    y_stride: int
    cb: bytes
    cr: bytes
    c_stride: int
    subsample_ratio: SubsampleRatio
    width: int
    height: int

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


@dataclass
class Gray16Image:
    """16-bit grayscale image; samples are stored big-endian in ``pix``."""

    width: int
    height: int
    pix: bytearray = field(default=None)  # type: ignore[assignment]
    stride: int = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.stride is None:
            self.stride = self.width * 2
        if self.pix is None:
            self.pix = bytearray(self.stride * self.height)
        else:
            self.pix = bytearray(self.pix)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def _offset(self, x: int, y: int) -> int | None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return y * self.stride + x * 2

    def at(self, x: int, y: int) -> int:
        """Return the sample at (x, y); 0 outside the image."""
        offset = self._offset(x, y)
        if offset is None:
            return 0
        return int.from_bytes(self.pix[offset:offset + 2], "big")

    def set(self, x: int, y: int, value: int) -> None:
        """Store *value* at (x, y); points outside the image are ignored."""
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"sample {value} does not fit in 16 bits")
        offset = self._offset(x, y)
        if offset is None:
            return
        self.pix[offset:offset + 2] = value.to_bytes(2, "big")


@dataclass
class RGBAImage:
    """8-bit RGBA image with four bytes per pixel in ``pix``."""

    width: int
    height: int
    pix: bytearray = field(default=None)  # type: ignore[assignment]
    stride: int = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.stride is None:
            self.stride = self.width * 4
        if self.pix is None:
            self.pix = bytearray(self.stride * self.height)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def at(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the (r, g, b, a) pixel at (x, y); transparent black outside."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return (0, 0, 0, 0)
        offset = y * self.stride + x * 4
        r, g, b, a = self.pix[offset:offset + 4]
        return (r, g, b, a)
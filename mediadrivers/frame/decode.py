"""Frame formats and lookup of the decoder for each."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

from mediadrivers.frame.images import FrameError
from mediadrivers.frame.mjpeg import decode_mjpeg
from mediadrivers.frame.yuv import (
    decode_i420,
    decode_nv12,
    decode_nv21,
    decode_uyvy,
    decode_yuy2,
)
from mediadrivers.frame.z16 import decode_z16

Decoder = Callable[[bytes, int, int], Any]


class Format(str, Enum):
    """Raw frame format names."""

    I420 = "I420"
    I444 = "I444"
    NV21 = "NV21"
    NV12 = "NV12"
    YUY2 = "YUY2"
    YUYV = "YUYV"
    UYVY = "UYVY"
    RGBA = "RGBA"
    MJPEG = "MJPEG"
    Z16 = "Z16"

    def __str__(self) -> str:
        return self.value


_DECODERS: dict[Format, Decoder] = {
    Format.I420: decode_i420,
    Format.NV21: decode_nv21,
    Format.NV12: decode_nv12,
    Format.YUY2: decode_yuy2,
    Format.YUYV: decode_yuy2,
    Format.UYVY: decode_uyvy,
    Format.MJPEG: decode_mjpeg,
    Format.Z16: decode_z16,
}


def new_decoder(fmt: Format | str) -> Decoder:
    """Return the decoder for *fmt*; raises FrameError if it is not supported."""
    try:
        key = Format(fmt)
    except ValueError:
        raise FrameError(f"{fmt} is not supported") from None
    try:
        return _DECODERS[key]
    except KeyError:
        raise FrameError(f"{key} is not supported") from None
"""Decoders for raw Y'CbCr frame layouts."""

from __future__ import annotations

from dataclasses import replace

from mediadrivers.frame.images import FrameError, SubsampleRatio, YCbCrImage


def _too_short(actual: int, expected: int) -> FrameError:
    return FrameError(f"frame length ({actual}) less than expected ({expected})")


def decode_i420(frame: bytes, width: int, height: int) -> YCbCrImage:
    """Decode planar 4:2:0 (Y plane, then Cb, then Cr)."""
    data = bytes(frame)
    yi = width * height
    cbi = yi + width * height // 4
    cri = cbi + width * height // 4
    if cri > len(data):
        raise _too_short(len(data), cri)
    return YCbCrImage(
        y=data[:yi],
        y_stride=width,
        cb=data[yi:cbi],
        cr=data[cbi:cri],
        c_stride=width // 2,
        subsample_ratio=SubsampleRatio.RATIO_420,
        width=width,
        height=height,
    )


def decode_nv21(frame: bytes, width: int, height: int) -> YCbCrImage:
    """Decode a Y plane followed by interleaved Cr/Cb pairs."""
    data = bytes(frame)
    yi = width * height
    ci = yi + width * height // 2
    if ci > len(data):
        raise _too_short(len(data), ci)
    return YCbCrImage(
        y=data[:yi],
        y_stride=width,
        cb=data[yi + 1:ci + 1:2],
        cr=data[yi:ci:2],
        c_stride=width // 2,
        subsample_ratio=SubsampleRatio.RATIO_420,
        width=width,
        height=height,
    )


def decode_nv12(frame: bytes, width: int, height: int) -> YCbCrImage:
    """Decode a Y plane followed by interleaved Cb/Cr pairs."""
    img = decode_nv21(frame, width, height)
    return replace(img, cb=img.cr, cr=img.cb)


def _decode_packed_422(
    frame: bytes, width: int, height: int, y_offset: int, cb_offset: int, cr_offset: int
) -> YCbCrImage:
    data = bytes(frame)
    yi = width * height
    ci = yi // 2
    fi = yi + 2 * ci
    if len(data) < fi:
        raise _too_short(len(data), fi)
    if yi % 2:
        raise FrameError(f"packed 4:2:2 needs an even number of pixels, got {yi}")
    y = bytearray(yi)
    y[0::2] = data[y_offset:fi:4]
    y[1::2] = data[y_offset + 2:fi:4]
    return YCbCrImage(
        y=bytes(y),
        y_stride=width,
        cb=data[cb_offset:fi:4],
        cr=data[cr_offset:fi:4],
        c_stride=width // 2,
        subsample_ratio=SubsampleRatio.RATIO_422,
        width=width,
        height=height,
    )


def decode_yuy2(frame: bytes, width: int, height: int) -> YCbCrImage:
    """Decode packed Y0 Cb Y1 Cr (YUY2, also called YUYV)."""
    return _decode_packed_422(frame, width, height, y_offset=0, cb_offset=1, cr_offset=3)


def decode_uyvy(frame: bytes, width: int, height: int) -> YCbCrImage:
    """Decode packed Cb Y0 Cr Y1 (UYVY)."""
    return _decode_packed_422(frame, width, height, y_offset=1, cb_offset=0, cr_offset=2)
import pytest

from mediadrivers.frame.images import (
    FrameError,
    Gray16Image,
    RGBAImage,
    SubsampleRatio,
    YCbCrImage,
)


def test_gray16_set_and_at_round_trip():
    img = Gray16Image(2, 3)
    img.set(1, 2, 800)
    img.set(0, 0, 12)
    assert img.at(1, 2) == 800
    assert img.at(0, 0) == 12
    assert img.at(1, 0) == 0


def test_gray16_stores_big_endian():
    img = Gray16Image(1, 1)
    img.set(0, 0, 800)
    assert bytes(img.pix) == (800).to_bytes(2, "big")


def test_gray16_default_layout():
    img = Gray16Image(2, 3)
    assert img.stride == 4
    assert len(img.pix) == 12
    assert img.size == (2, 3)


def test_gray16_out_of_bounds_is_ignored():
    img = Gray16Image(2, 2)
    img.set(5, 5, 100)
    assert img.at(5, 5) == 0
    assert img.at(-1, 0) == 0
    assert all(b == 0 for b in img.pix)


def test_gray16_rejects_value_too_large():
    img = Gray16Image(1, 1)
    with pytest.raises(ValueError):
        img.set(0, 0, 0x10000)


def test_gray16_equality():
    a = Gray16Image(2, 1)
    b = Gray16Image(2, 1)
    a.set(1, 0, 93)
    assert a != b
    b.set(1, 0, 93)
    assert a == b


def test_rgba_at_reads_pixel():
    pix = bytearray(range(16))
    img = RGBAImage(2, 2, pix=pix)
    assert img.at(0, 0) == (0, 1, 2, 3)
    assert img.at(1, 1) == (12, 13, 14, 15)


def test_rgba_out_of_bounds():
    img = RGBAImage(1, 1, pix=bytearray(b"\x01\x02\x03\x04"))
    assert img.at(1, 0) == (0, 0, 0, 0)
    assert img.stride == 4


def test_ycbcr_equality_and_size():
    kwargs = dict(
        y=b"\x01\x03\x05\x07",
        y_stride=2,
        cb=b"\x84",
        cr=b"\x82",
        c_stride=1,
        subsample_ratio=SubsampleRatio.RATIO_420,
        width=2,
        height=2,
    )
    assert YCbCrImage(**kwargs) == YCbCrImage(**kwargs)
    assert YCbCrImage(**kwargs).size == (2, 2)


def test_frame_error_is_value_error():
    err = FrameError("bad")
    assert str(err) == "bad"
    assert isinstance(err, ValueError)
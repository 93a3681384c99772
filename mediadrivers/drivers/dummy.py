"""Synthetic camera and microphone devices for testing."""

from __future__ import annotations

import math
import random
import threading
import time
from array import array
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from mediadrivers.driver import DeviceType, Driver, Info, MediaProperties
from mediadrivers.frame.decode import Format
from mediadrivers.frame.images import SubsampleRatio, YCbCrImage
from mediadrivers.manager import Manager, get_manager

_COLORS = (
    (235, 128, 128),
    (210, 16, 146),
    (170, 166, 16),
    (145, 54, 34),
    (107, 202, 222),
    (82, 90, 240),
    (41, 240, 110),
)
_SINE = array("f", (math.sin(2 * math.pi * i / 100) * 0.25 for i in range(100)))
DEFAULT_LATENCY = 0.02


@dataclass
class AudioChunk:
    """Interleaved float32 samples: ``length`` frames of ``channels`` samples each."""

    channels: int
    length: int
    sampling_rate: int
    samples: array = field(default_factory=lambda: array("f"))

    def __len__(self) -> int:
        return self.length

    def at(self, index: int, channel: int) -> float:
        """Return the sample of *channel* in frame *index*."""
        if not 0 <= index < self.length or not 0 <= channel < self.channels:
            raise IndexError(f"sample ({index}, {channel}) out of range")
        return self.samples[index * self.channels + channel]


def _half_row(values: Iterable[int], width: int) -> bytes:
    row = bytearray((width + 1) // 2)
    for x, value in enumerate(values):
        row[x // 2] = value
    return bytes(row)


def _put(plane: bytearray, offset: int, row: bytes) -> None:
    if offset + len(row) > len(plane):
        raise ValueError("frame size does not fit 4:2:2 chroma planes")
    plane[offset:offset + len(row)] = row


class VideoTestDevice:
    """A camera showing colour bars, a grey gradation and a noise area."""

    def __init__(self) -> None:
        self._closed = threading.Event()

    def open(self) -> None:
        self._closed = threading.Event()

    def close(self) -> None:
        self._closed.set()

    def video_record(self, props: MediaProperties) -> Iterator[YCbCrImage]:
        """Return a generator of 4:2:2 frames at ``props.frame_rate``; it ends on close."""
        if props.frame_rate <= 0:
            raise ValueError(f"frame rate must be positive, got {props.frame_rate}")
        width, height = props.width, props.height
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid frame size {width}x{height}")

        luma_size = width * height
        chroma_size = luma_size // 2
        yy_base = bytearray(luma_size)
        cb_base = bytearray(chroma_size)
        cr_base = bytearray(chroma_size)
        bar_end = height * 3 // 4
        gradation_end = width * 5 // 7

        bar_y = bytes(_COLORS[x * 7 // width][0] * 75 // 100 for x in range(width))
        bar_cb = _half_row((_COLORS[x * 7 // width][1] for x in range(width)), width)
        bar_cr = _half_row((_COLORS[x * 7 // width][2] for x in range(width)), width)
        low_y = bytes(x * 255 // gradation_end for x in range(gradation_end))
        flat = _half_row((128 for _ in range(width)), width)

        for y in range(height):
            yi = width * y
            ci = width * y // 2
            if y < bar_end:
                _put(yy_base, yi, bar_y)
                _put(cb_base, ci, bar_cb)
                _put(cr_base, ci, bar_cr)
            else:
                _put(yy_base, yi, low_y)
                _put(cb_base, ci, flat)
                _put(cr_base, ci, flat)

        cb = bytes(cb_base)
        cr = bytes(cr_base)
        rng = random.Random(0)
        period = 1.0 / props.frame_rate
        closed = self._closed
        noise_width = width - gradation_end

        def frames() -> Iterator[YCbCrImage]:
            next_tick = time.monotonic() + period
            while not closed.is_set():
                delay = next_tick - time.monotonic()
                if delay > 0 and closed.wait(delay):
                    return
                now = time.monotonic()
                next_tick += period
                if next_tick < now:
                    next_tick = now + period
                yy = bytearray(yy_base)
                for y in range(bar_end, height):
                    yi = width * y
                    yy[yi + gradation_end:yi + width] = bytes(
                        rng.getrandbits(1) * 255 for _ in range(noise_width)
                    )
                yield YCbCrImage(
                    y=bytes(yy),
                    y_stride=width,
                    cb=cb,
                    cr=cr,
                    c_stride=width // 2,
                    subsample_ratio=SubsampleRatio.RATIO_422,
                    width=width,
                    height=height,
                )

        return frames()

    def properties(self) -> list[MediaProperties]:
        return [
            MediaProperties(width=640, height=480, frame_format=Format.YUYV, frame_rate=30)
        ]


class AudioTestDevice:
    """A microphone producing a quiet sine tone with a period of 100 samples."""

    def __init__(self) -> None:
        self._closed = threading.Event()

    def open(self) -> None:
        self._closed = threading.Event()

    def close(self) -> None:
        self._closed.set()

    def audio_record(self, props: MediaProperties) -> Iterator[AudioChunk]:
        """Return a generator of chunks, one per ``props.latency`` (20 ms if unset)."""
        latency = props.latency if props.latency else DEFAULT_LATENCY
        rate = props.sample_rate
        channels = props.channel_count
        latency_ns = round(latency * 1_000_000_000)
        n_sample = rate * latency_ns // 1_000_000_000
        closed = self._closed

        def chunks() -> Iterator[AudioChunk]:
            next_read = time.monotonic()
            phase = 0
            while not closed.is_set():
                delay = next_read - time.monotonic()
                if delay > 0 and closed.wait(delay):
                    return
                next_read += latency
                samples = array("f")
                for _ in range(n_sample):
                    phase = (phase + 1) % 100
                    samples.extend([_SINE[phase]] * channels)
                yield AudioChunk(channels, n_sample, rate, samples)

        return chunks()

    def properties(self) -> list[MediaProperties]:
        return [
            MediaProperties(sample_rate=48000, latency=0.02, channel_count=1),
            MediaProperties(sample_rate=48000, latency=0.02, channel_count=2),
        ]


def register_test_drivers(manager: Manager | None = None) -> list[Driver]:
    """Register the test camera and microphone; returns their drivers."""
    target = manager if manager is not None else get_manager()
    return [
        target.register(
            VideoTestDevice(), Info(label="VideoTest", device_type=DeviceType.CAMERA)
        ),
        target.register(
            AudioTestDevice(), Info(label="AudioTest", device_type=DeviceType.MICROPHONE)
        ),
    ]
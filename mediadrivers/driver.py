"""Driver descriptions and the wrapper that gives adapters a managed lifecycle."""

from __future__ import annotations

import contextlib
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Protocol

from mediadrivers.availability import UnimplementedError
from mediadrivers.state import State, StateTracker


class DeviceType(str, Enum):
    """Human readable kind of device; useful for filtering drivers."""

    CAMERA = "camera"
    MICROPHONE = "microphone"
    SCREEN = "screen"

    def __str__(self) -> str:
        return self.value


class Priority(float, Enum):
    """Device selection priority."""

    HIGH = 0.1
    NORMAL = 0.0
    LOW = -0.1


@dataclass(frozen=True)
class Info:
    """Static description of a registered device."""

    label: str = ""
    device_type: DeviceType | None = None
    priority: Priority = Priority.NORMAL
    name: str = ""


@dataclass
class MediaProperties:
    """Video and audio properties of a device mode.

    Durations (``latency``, ``discard_frames_older_than``) are in seconds.
    """

    device_id: str = ""
    width: int = 0
    height: int = 0
    frame_format: str | None = None
    frame_rate: float = 0.0
    discard_frames_older_than: float = 0.0
    sample_rate: int = 0
    latency: float = 0.0
    channel_count: int = 0
    sample_size: int = 0
    is_float: bool = False
    is_interleaved: bool = False
    is_big_endian: bool = False


class Adapter(Protocol):
    """What a device implementation must provide."""

    def open(self) -> None: ...

    def close(self) -> None: ...

    def properties(self) -> list[MediaProperties]: ...


class Driver:
    """An adapter with an identity, a description and a tracked lifecycle."""

    def __init__(self, adapter: Adapter, info: Info) -> None:
        self.adapter = adapter
        self.id = str(uuid.uuid4())
        self.info = info
        self._state = StateTracker(State.CLOSED)

    @property
    def status(self) -> State:
        return self._state.state

    def open(self) -> None:
        self._state.update(State.OPENED, self.adapter.open)

    def close(self) -> None:
        self._state.update(State.CLOSED, self.adapter.close)

    def properties(self) -> list[MediaProperties]:
        """Properties of the device, tagged with this driver's id; empty while closed."""
        if self.status is State.CLOSED:
            return []
        return [replace(p, device_id=self.id) for p in self.adapter.properties() or []]

    def is_available(self) -> bool:
        """Ask the adapter whether the device can be used.

        Raises UnimplementedError if the adapter cannot tell.
        """
        check = getattr(self.adapter, "is_available", None)
        if not callable(check):
            raise UnimplementedError()
        return bool(check())

    def _record(self, start: Any) -> Any:
        try:
            return self._state.update(State.RUNNING, start)
        except Exception:
            with contextlib.suppress(Exception):
                self.close()
            raise

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, info={self.info!r}, status={self.status.value!r})"


class VideoDriver(Driver):
    """Driver whose adapter records video."""

    def video_record(self, props: MediaProperties) -> Any:
        """Start recording; on failure the driver is closed and the error re-raised."""
        return self._record(lambda: self.adapter.video_record(props))


class AudioDriver(Driver):
    """Driver whose adapter records audio."""

    def audio_record(self, props: MediaProperties) -> Any:
        """Start recording; on failure the driver is closed and the error re-raised."""
        return self._record(lambda: self.adapter.audio_record(props))


def wrap_adapter(adapter: Adapter, info: Info) -> Driver:
    """Wrap *adapter* in a video or audio driver, depending on what it records."""
    if callable(getattr(adapter, "video_record", None)):
        return VideoDriver(adapter, info)
    if callable(getattr(adapter, "audio_record", None)):
        return AudioDriver(adapter, info)
    raise TypeError("adapter has to be either a video recorder or an audio recorder")


def is_available(driver: Any) -> bool:
    """Return whether the driver's device is available.

    Raises UnimplementedError if the driver cannot tell.
    """
    check = getattr(driver, "is_available", None)
    if not callable(check):
        raise UnimplementedError()
    return bool(check())
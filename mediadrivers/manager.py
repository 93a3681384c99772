"""Registry of drivers and predicates for querying it."""

from __future__ import annotations

import threading
from typing import Callable

from mediadrivers.driver import (
    Adapter,
    AudioDriver,
    DeviceType,
    Driver,
    Info,
    VideoDriver,
    wrap_adapter,
)

Predicate = Callable[[Driver], bool]


def filter_video_recorder() -> Predicate:
    """Match drivers that record video."""
    return lambda d: isinstance(d, VideoDriver)


def filter_audio_recorder() -> Predicate:
    """Match drivers that record audio."""
    return lambda d: isinstance(d, AudioDriver)


def filter_id(driver_id: str) -> Predicate:
    """Match the driver with the given id."""
    return lambda d: d.id == driver_id


def filter_device_type(device_type: DeviceType) -> Predicate:
    """Match drivers of the given device type."""
    return lambda d: d.info.device_type == device_type


def filter_and(*args: Predicate) -> Predicate:
    """Match drivers that every given predicate matches."""
    return lambda d: all(f(d) for f in args)


def filter_not(predicate: Predicate) -> Predicate:
    """Match drivers that *predicate* does not match."""
    return lambda d: not predicate(d)


class Manager:
    """Thread-safe registry of drivers keyed by id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._drivers: dict[str, Driver] = {}

    def register(self, adapter: Adapter, info: Info) -> Driver:
        """Wrap *adapter* and make it discoverable by query; returns the driver."""
        driver = wrap_adapter(adapter, info)
        with self._lock:
            self._drivers[driver.id] = driver
        return driver

    def query(self, predicate: Predicate) -> list[Driver]:
        """Return the registered drivers that *predicate* accepts."""
        with self._lock:
            drivers = list(self._drivers.values())
        return [d for d in drivers if predicate(d)]

    def delete(self, driver_id: str) -> None:
        """Remove the driver with *driver_id*, if registered."""
        with self._lock:
            self._drivers.pop(driver_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._drivers)


_manager = Manager()


def get_manager() -> Manager:
    """Return the process-wide manager."""
    return _manager
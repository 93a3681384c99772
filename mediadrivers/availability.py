"""Errors that describe why a device cannot be used right now."""

from __future__ import annotations


class AvailabilityError(Exception):
    """Base class for device availability errors."""

    default_message = "device unavailable"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class UnimplementedError(AvailabilityError):
    """The driver cannot report whether its device is available."""

    default_message = "not implemented"


class BusyError(AvailabilityError):
    """The device is held by someone else."""

    default_message = "device or resource busy"


class NoDeviceError(AvailabilityError):
    """The device does not exist."""

    default_message = "no such device"


def is_availability_error(err: BaseException | None) -> bool:
    """Return True if *err* is one of the availability errors."""
    return isinstance(err, AvailabilityError)
import pytest

from mediadrivers.availability import (
    AvailabilityError,
    BusyError,
    NoDeviceError,
    UnimplementedError,
    is_availability_error,
)


@pytest.mark.parametrize(
    "cls, message",
    [
        (UnimplementedError, "not implemented"),
        (BusyError, "device or resource busy"),
        (NoDeviceError, "no such device"),
    ],
)
def test_default_messages(cls, message):
    err = cls()
    assert str(err) == message
    assert err.message == message


@pytest.mark.parametrize("cls", [UnimplementedError, BusyError, NoDeviceError])
def test_subclasses_are_availability_errors(cls):
    assert issubclass(cls, AvailabilityError)
    assert is_availability_error(cls())


def test_custom_message_is_kept():
    err = AvailabilityError("permission denied")
    assert str(err) == "permission denied"
    assert is_availability_error(err)


def test_other_errors_are_not_availability_errors():
    assert not is_availability_error(ValueError("not implemented"))
    assert not is_availability_error(None)


def test_raised_error_can_be_caught_by_base():
    err = BusyError()
    assert is_availability_error(err)
    with pytest.raises(AvailabilityError, match="device or resource busy") as exc_info:
        raise err
    assert exc_info.value.message == "device or resource busy"
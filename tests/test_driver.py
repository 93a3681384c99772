import pytest

from mediadrivers.availability import UnimplementedError
from mediadrivers.driver import (
    AudioDriver,
    DeviceType,
    Info,
    MediaProperties,
    Priority,
    VideoDriver,
    is_available,
    wrap_adapter,
)
from mediadrivers.state import State, StateError

record_err = RuntimeError("failed to start recording")


class AdapterMock:
    def __init__(self):
        self.closed = 0

    def open(self):
        return None

    def close(self):
        self.closed += 1

    def properties(self):
        return [MediaProperties()]


class VideoAdapterMock(AdapterMock):
    def video_record(self, props):
        return "video-reader"


class VideoAdapterBrokenMock(AdapterMock):
    def video_record(self, props):
        raise record_err


class AudioAdapterMock(AdapterMock):
    def audio_record(self, props):
        return "audio-reader"


class AudioAdapterBrokenMock(AdapterMock):
    def audio_record(self, props):
        raise record_err


class AvailabilityAdapterMock(VideoAdapterMock):
    def is_available(self):
        return True


def test_video_wrapper_state():
    d = wrap_adapter(VideoAdapterMock(), Info())
    assert isinstance(d, VideoDriver)
    assert d.properties() == []

    with pytest.raises(StateError):
        d.video_record(MediaProperties())

    d.open()
    assert d.status is State.OPENED
    assert d.video_record(MediaProperties()) == "video-reader"
    assert d.status is State.RUNNING


def test_video_wrapper_with_broken_recorder_state():
    adapter = VideoAdapterBrokenMock()
    d = wrap_adapter(adapter, Info())
    d.open()
    with pytest.raises(RuntimeError) as exc_info:
        d.video_record(MediaProperties())
    assert exc_info.value is record_err
    assert d.status is State.CLOSED
    assert adapter.closed == 1


def test_audio_wrapper_state():
    d = wrap_adapter(AudioAdapterMock(), Info())
    assert isinstance(d, AudioDriver)
    assert d.properties() == []

    with pytest.raises(StateError):
        d.audio_record(MediaProperties())

    d.open()
    assert d.audio_record(MediaProperties()) == "audio-reader"
    assert d.status is State.RUNNING


def test_audio_wrapper_with_broken_recorder_state():
    d = wrap_adapter(AudioAdapterBrokenMock(), Info())
    d.open()
    with pytest.raises(RuntimeError) as exc_info:
        d.audio_record(MediaProperties())
    assert exc_info.value is record_err
    assert d.status is State.CLOSED


def test_wrapper_availability_adapter():
    d = wrap_adapter(AvailabilityAdapterMock(), Info())
    assert is_available(d) is True

    d = wrap_adapter(VideoAdapterMock(), Info())
    with pytest.raises(UnimplementedError):
        is_available(d)

    d = wrap_adapter(AudioAdapterMock(), Info())
    with pytest.raises(UnimplementedError):
        d.is_available()


def test_is_available_on_object_without_check():
    with pytest.raises(UnimplementedError):
        is_available(object())


def test_wrap_rejects_plain_adapter():
    with pytest.raises(TypeError):
        wrap_adapter(AdapterMock(), Info())


def test_properties_carry_driver_id_when_opened():
    d = wrap_adapter(VideoAdapterMock(), Info())
    d.open()
    props = d.properties()
    assert len(props) == 1
    assert props[0].device_id == d.id


def test_ids_are_unique_and_info_kept():
    info = Info(label="cam", device_type=DeviceType.CAMERA, priority=Priority.HIGH)
    a = wrap_adapter(VideoAdapterMock(), info)
    b = wrap_adapter(VideoAdapterMock(), info)
    assert a.id != b.id
    assert a.info == info
    assert a.info.device_type == "camera"


def test_open_twice_raises_and_close_resets():
    d = wrap_adapter(VideoAdapterMock(), Info())
    d.open()
    with pytest.raises(StateError):
        d.open()
    d.close()
    assert d.status is State.CLOSED
    d.open()
    assert d.status is State.OPENED


def test_priority_values():
    assert Priority.HIGH > Priority.NORMAL > Priority.LOW
    assert Info().priority is Priority.NORMAL
# mediadrivers

A toolkit for media capture code:

- `mediadrivers.manager` – a thread-safe registry of drivers (`Manager`,
  `get_manager()`) with composable predicates: `filter_video_recorder`,
  `filter_audio_recorder`, `filter_id`, `filter_device_type`, `filter_and`
  and `filter_not`.
- `mediadrivers.driver` – `wrap_adapter` turns any object with `open`,
  `close`, `properties` and either `video_record` or `audio_record` into a
  `VideoDriver` or `AudioDriver` with a random id, an `Info` description and
  a tracked lifecycle. Anything else is refused with `TypeError`.
- `mediadrivers.state` – the lifecycle rules (`State.CLOSED`, `OPENED`,
  `RUNNING`); a forbidden transition raises `StateError`.
- `mediadrivers.availability` – `AvailabilityError` and its subclasses
  `UnimplementedError`, `BusyError` and `NoDeviceError`.
- `mediadrivers.frame` – decoders for raw frames: I420, NV12, NV21,
  YUY2/YUYV, UYVY, Z16 depth maps and MJPEG (including Motion-JPEG frames
  that lack Huffman tables).
- `mediadrivers.vnc` – an RFB (VNC) client, and
  `mediadrivers.drivers.vnc_device.VncDevice`, a video device that shows a
  remote desktop.
- `mediadrivers.drivers.dummy` – synthetic devices: a colour-bar camera and
  a sine-tone microphone.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Decoding a frame

```python
from mediadrivers.frame.decode import Format, new_decoder

decode = new_decoder(Format.YUY2)
image = decode(raw_bytes, 640, 480)      # a YCbCrImage
print(image.y[:4], image.cb[:2], image.cr[:2], image.subsample_ratio)
```

The Y'CbCr decoders return a `YCbCrImage`, `Z16` returns a `Gray16Image`
(`image.at(x, y)` gives the depth sample) and `MJPEG` returns a Pillow
image. `new_decoder` raises `FrameError` (a `ValueError`) for a format it
has no decoder for, such as `RGBA` or `I444`; the decoders raise
`FrameError` when a frame is too short for its dimensions (or, for Z16, not
exactly the right length). `add_motion_dht` in `mediadrivers.frame.mjpeg`
inserts the standard Huffman tables before the start-of-scan marker.

## Registering and finding drivers

```python
from mediadrivers.driver import DeviceType
from mediadrivers.drivers.dummy import register_test_drivers
from mediadrivers.manager import (
    filter_and, filter_device_type, filter_video_recorder, get_manager,
)

manager = get_manager()
register_test_drivers(manager)

query = filter_and(filter_video_recorder(), filter_device_type(DeviceType.CAMERA))
for driver in manager.query(query):
    driver.open()
    props = driver.properties()[0]       # 640x480 YUYV at 30 fps
    frames = driver.video_record(props)  # a generator of YCbCrImage
    frame = next(frames)
    driver.close()                       # the generator then ends
```

A wrapped driver reports no properties while closed, refuses to record
before it is opened or while already running, and goes back to the closed
state if the adapter fails to start recording (the error is re-raised).
`driver.is_available()` asks the adapter and raises `UnimplementedError` if
the adapter cannot tell.

The test microphone yields `AudioChunk` objects of interleaved float32
samples, one chunk per `latency` seconds (20 ms if unset).

## Capturing a VNC desktop

```python
from mediadrivers.drivers.vnc_device import VncDevice

device = VncDevice("localhost:5900")
device.open()
frames = device.video_record(device.properties()[0])   # 30 fps if unset
image = next(frames)                                   # an RGBAImage
device.close()
```

`VncDevice` connects over TCP without authentication and asks for zlib, raw
and cursor encodings; `pointer_event` and `key_event` are forwarded to the
server. For password authentication use the client directly:

```python
import socket
from mediadrivers.vnc.auth import PasswordAuth
from mediadrivers.vnc.client import ClientConfig, connect

password = "password"
sock = socket.create_connection(("localhost", 5900))
conn = connect(sock.makefile("rwb"), ClientConfig(auth=[PasswordAuth(password=password)]))
print(conn.frame_buffer_width, conn.frame_buffer_height, conn.desktop_name)
conn.close()
```

`connect` accepts any object with `read`, `write` and `close`, runs the
handshake (raising `VNCError` on failure) and then reads server messages on a
background thread, putting them on `ClientConfig.message_queue` if one is
given.

## What it does not do

There are no drivers for real cameras, microphones or local screens: the
only devices provided are the synthetic test devices and `VncDevice`. There
is no command-line program, and no encoding or streaming of the captured
media.
"""Video driver that shows the framebuffer of a remote desktop server."""

from __future__ import annotations

import contextlib
import queue
import socket
import struct
import threading
import time
from typing import Any, Callable, Iterator

from mediadrivers.driver import MediaProperties
from mediadrivers.frame.decode import Format
from mediadrivers.frame.images import RGBAImage
from mediadrivers.vnc.client import ClientConfig, ClientConn, connect
from mediadrivers.vnc.encoding import (
    CursorEncoding,
    RawEncoding,
    Rectangle,
    ZlibEncoding,
)
from mediadrivers.vnc.messages import FramebufferUpdateMessage
from mediadrivers.vnc.pixels import ButtonMask

DEFAULT_FRAME_RATE = 30.0
DEFAULT_IDLE_TIMEOUT = 10.0
_POLL_INTERVAL = 0.05


class _TcpStream:
    """Blocking byte stream over a connected socket."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    def read(self, size: int) -> bytes:
        return self._sock.recv(size)

    def write(self, data: bytes) -> None:
        self._sock.sendall(data)

    def close(self) -> None:
        with contextlib.suppress(OSError):
            self._sock.shutdown(socket.SHUT_RDWR)
        self._sock.close()


def _open_tcp(address: str) -> _TcpStream:
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"address {address!r} is not of the form host:port")
    host = host.strip("[]")
    return _TcpStream(socket.create_connection((host, int(port))))


class VncDevice:
    """A screen captured from a remote framebuffer server at ``host:port``.

    ``stream_factory`` turns the address into a byte stream with read, write
    and close; by default a TCP connection is made.
    """

    def __init__(
        self,
        vnc_addr: str,
        stream_factory: Callable[[str], Any] | None = None,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
    ) -> None:
        self.vnc_addr = vnc_addr
        self.idle_timeout = idle_timeout
        self.width = 0
        self.height = 0
        self._factory = stream_factory if stream_factory is not None else _open_tcp
        self._lock = threading.Lock()
        self._pixels_lock = threading.Lock()
        self._client: ClientConn | None = None
        self._closed = threading.Event()
        self._raw = bytearray()

    def pointer_event(self, mask: int | ButtonMask, x: int, y: int) -> None:
        """Forward a pointer event to the server, if connected."""
        client = self._client
        if client is not None:
            client.pointer_event(int(mask), x, y)

    def key_event(self, keysym: int, down: bool) -> None:
        """Forward a key press or release to the server, if connected."""
        client = self._client
        if client is not None:
            client.key_event(keysym, down)

    def open(self) -> None:
        """Connect to the server and start following framebuffer updates."""
        with self._lock:
            if self._client is not None:
                return
            closed = threading.Event()
            messages: queue.Queue = queue.Queue(maxsize=1)
            config = ClientConfig(message_queue=messages, exclusive=False)
            client = connect(self._factory(self.vnc_addr), config)
            client.set_encodings([ZlibEncoding(), RawEncoding(), CursorEncoding()])
            with self._pixels_lock:
                self.width = client.frame_buffer_width
                self.height = client.frame_buffer_height
                self._raw = bytearray(self.width * self.height * 4)
            self._closed = closed
            self._client = client
        threading.Thread(
            target=self._update_loop,
            args=(client, messages, closed),
            name="vnc-device-updates",
            daemon=True,
        ).start()

    def close(self) -> None:
        """Stop readers and disconnect from the server."""
        self._closed.set()
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            client.close()

    def _request(self, client: ClientConn) -> None:
        client.framebuffer_update_request(True, 0, 0, self.width, self.height)

    def _update_loop(
        self, client: ClientConn, messages: queue.Queue, closed: threading.Event
    ) -> None:
        with contextlib.suppress(Exception):
            self._request(client)
        last_activity = time.monotonic()
        while not closed.is_set():
            try:
                message = messages.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                now = time.monotonic()
                if now - last_activity >= self.idle_timeout:
                    last_activity = now
                    try:
                        self._request(client)
                    except Exception:
                        closed.set()
                        return
                continue
            last_activity = time.monotonic()
            if isinstance(message, FramebufferUpdateMessage):
                for rect in message.rectangles:
                    self._apply(rect)
                with contextlib.suppress(Exception):
                    self._request(client)

    def _apply(self, rect: Rectangle) -> None:
        enc = rect.enc
        if not isinstance(enc, (RawEncoding, ZlibEncoding)):
            # Cursor shapes and unknown encodings carry nothing to draw.
            return
        with self._pixels_lock:
            width, height = self.width, self.height
            x_end = min(rect.x + rect.width, width)
            if rect.x >= x_end:
                return
            for row in range(rect.y, min(rect.y + rect.height, height)):
                start = (row - rect.y) * rect.width + 0
                values = enc.raw_pixel[start:start + (x_end - rect.x)]
                offset = (row * width + rect.x) * 4
                self._raw[offset:offset + 4 * len(values)] = struct.pack(
                    f"<{len(values)}I", *values
                )

    def _snapshot(self) -> RGBAImage:
        with self._pixels_lock:
            return RGBAImage(
                self.width, self.height, pix=bytearray(self._raw), stride=self.width * 4
            )

    def video_record(self, props: MediaProperties) -> Iterator[RGBAImage]:
        """Return a generator of RGBA frames, paced by ``props.frame_rate`` (30 if unset).

        The generator ends once the device is closed.
        """
        rate = props.frame_rate if props.frame_rate else DEFAULT_FRAME_RATE
        if rate <= 0:
            raise ValueError(f"frame rate must be positive, got {rate}")
        period = 1.0 / rate
        closed = self._closed

        def frames() -> Iterator[RGBAImage]:
            next_tick = time.monotonic() + period
            while not closed.is_set():
                delay = next_tick - time.monotonic()
                if delay > 0 and closed.wait(delay):
                    return
                now = time.monotonic()
                next_tick += period
                if next_tick < now:
                    next_tick = now + period
                yield self._snapshot()

        return frames()

    def properties(self) -> list[MediaProperties]:
        """The single mode of the device: the remote framebuffer size in RGBA."""
        return [
            MediaProperties(width=self.width, height=self.height, frame_format=Format.RGBA)
        ]
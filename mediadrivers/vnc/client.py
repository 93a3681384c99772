"""Client side of the remote framebuffer protocol."""

from __future__ import annotations

import queue
import re
import struct
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable

from mediadrivers.vnc.auth import ClientAuth, ClientAuthNone
from mediadrivers.vnc.encoding import Encoding
from mediadrivers.vnc.messages import DEFAULT_MESSAGES, ServerMessage
from mediadrivers.vnc.pixels import Color, PixelFormat, read_exact

PROTOCOL_VERSION_LENGTH = 12
COLOR_MAP_SIZE = 256
_VERSION_RE = re.compile(rb"RFB (\d+)\.(\d+)\n")


class VNCError(Exception):
    """The server broke the protocol or refused the connection."""


def parse_protocol_version(data: bytes) -> tuple[int, int]:
    """Return (major, minor) from a 12-byte ProtocolVersion message."""
    if len(data) < PROTOCOL_VERSION_LENGTH:
        raise VNCError(
            f"ProtocolVersion message too short ({len(data)} < {PROTOCOL_VERSION_LENGTH})"
        )
    match = _VERSION_RE.match(bytes(data))
    if match is None:
        raise VNCError("error parsing ProtocolVersion")
    return int(match[1]), int(match[2])


@dataclass
class ClientConfig:
    """Settings of a client connection.

    Only the first scheme in ``auth`` that the server supports is used; when
    ``auth`` is None, no authentication is offered. Messages from the server
    are put on ``message_queue`` and dropped if it is None.
    ``server_messages`` adds message types beyond the standard ones.
    """

    auth: list[ClientAuth] | None = None
    exclusive: bool = False
    message_queue: queue.Queue | None = None
    server_messages: list[type[ServerMessage]] = field(default_factory=list)


class ClientConn:
    """An established connection to a framebuffer server."""

    def __init__(self, stream: Any, config: ClientConfig | None = None) -> None:
        self._stream = stream
        self.config = config if config is not None else ClientConfig()
        self.color_map: list[Color] = [Color()] * COLOR_MAP_SIZE
        self.encodings: list[Encoding] = []
        self.frame_buffer_width = 0
        self.frame_buffer_height = 0
        self.desktop_name = ""
        self.pixel_format = PixelFormat()
        self._write_lock = threading.Lock()
        self._reader: threading.Thread | None = None

    def __enter__(self) -> ClientConn:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying stream."""
        self._stream.close()

    def _send(self, data: bytes) -> None:
        with self._write_lock:
            self._stream.write(data)
            flush = getattr(self._stream, "flush", None)
            if callable(flush):
                flush()

    def _read_struct(self, fmt: str) -> tuple:
        return struct.unpack(fmt, read_exact(self._stream, struct.calcsize(fmt)))

    def cut_text(self, text: str) -> None:
        """Tell the server the client's cut buffer holds *text* (Latin-1 only)."""
        for char in text:
            if ord(char) > 0xFF:
                raise VNCError(f"Character '{ord(char)}' is not valid Latin-1")
        data = text.encode("latin-1")
        self._send(struct.pack(">BxxxI", 6, len(data)) + data)

    def framebuffer_update_request(
        self, incremental: bool, x: int, y: int, width: int, height: int
    ) -> None:
        """Ask the server for an update of the given area."""
        self._send(struct.pack(">BBHHHH", 3, int(bool(incremental)), x, y, width, height))

    def key_event(self, keysym: int, down: bool) -> None:
        """Send a key press or release, given as an X keysym."""
        self._send(struct.pack(">BBxxI", 4, int(bool(down)), keysym))

    def pointer_event(self, mask: int, x: int, y: int) -> None:
        """Send pointer position and the set of pressed buttons."""
        self._send(struct.pack(">BBHH", 5, int(mask), x, y))

    def set_encodings(self, encodings: Iterable[Encoding]) -> None:
        """Tell the server which encodings the client accepts."""
        encs = list(encodings)
        data = struct.pack(">BxH", 2, len(encs))
        data += b"".join(struct.pack(">i", enc.encoding_type) for enc in encs)
        self._send(data)
        self.encodings = encs

    def set_pixel_format(self, pixel_format: PixelFormat) -> None:
        """Ask the server to send pixels in *pixel_format*; resets the colour map."""
        self._send(b"\x00\x00\x00\x00" + pixel_format.to_bytes())
        self.color_map = [Color()] * COLOR_MAP_SIZE

    def _read_error_reason(self) -> str:
        try:
            (length,) = self._read_struct(">I")
            return read_exact(self._stream, length).decode("utf-8", errors="replace")
        except Exception:
            return "<error>"

    def _choose_auth(self, security_types: bytes) -> ClientAuth:
        candidates = self.config.auth if self.config.auth is not None else [ClientAuthNone()]
        for auth in candidates:
            if auth.security_type in security_types:
                return auth
        raise VNCError(
            f"no suitable auth schemes found. server supported: {list(security_types)}"
        )

    def _handshake(self) -> None:
        major, minor = parse_protocol_version(
            read_exact(self._stream, PROTOCOL_VERSION_LENGTH)
        )
        if major < 3:
            raise VNCError(f"unsupported major version, less than 3: {major}")
        if minor < 3:
            raise VNCError(f"unsupported minor version, less than 3: {minor}")

        if minor < 8:
            self._send(b"RFB 003.003\n")
            (security_type,) = self._read_struct(">I")
            if security_type == 0:
                raise VNCError(f"no security types: {self._read_error_reason()}")
        else:
            self._send(b"RFB 003.008\n")
            (count,) = self._read_struct(">B")
            if count == 0:
                raise VNCError(f"no security types: {self._read_error_reason()}")
            security_types = read_exact(self._stream, count)
            auth = self._choose_auth(security_types)
            self._send(bytes([auth.security_type]))
            auth.handshake(self._stream)
            (result,) = self._read_struct(">I")
            if result == 1:
                raise VNCError(f"security handshake failed: {self._read_error_reason()}")

        self._send(bytes([0 if self.config.exclusive else 1]))

        self.frame_buffer_width, self.frame_buffer_height = self._read_struct(">HH")
        self.pixel_format = PixelFormat.read(self._stream)
        (name_length,) = self._read_struct(">I")
        self.desktop_name = read_exact(self._stream, name_length).decode(
            "utf-8", errors="replace"
        )

    def _main_loop(self) -> None:
        handlers = {msg.message_type: msg for msg in DEFAULT_MESSAGES}
        handlers.update({msg.message_type: msg for msg in self.config.server_messages})
        try:
            while True:
                try:
                    (message_type,) = read_exact(self._stream, 1)
                except Exception:
                    break
                handler = handlers.get(message_type)
                if handler is None:
                    break
                try:
                    message = handler.read(self, self._stream)
                except Exception:
                    break
                if self.config.message_queue is not None:
                    self.config.message_queue.put(message)
        finally:
            try:
                self.close()
            except Exception:
                pass

    def _start(self) -> None:
        self._reader = threading.Thread(
            target=self._main_loop, name="vnc-reader", daemon=True
        )
        self._reader.start()


def connect(stream: Any, config: ClientConfig | None = None) -> ClientConn:
    """Run the handshake over *stream* and start reading server messages.

    The stream is closed if the handshake fails.
    """
    conn = ClientConn(stream, config)
    try:
        conn._handshake()
    except BaseException:
        conn.close()
        raise
    conn._start()
    return conn
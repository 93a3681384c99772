"""Messages sent from the server to the client."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, MutableSequence, Protocol, Sequence

from mediadrivers.vnc.encoding import Encoding, RawEncoding, Rectangle
from mediadrivers.vnc.pixels import Color, PixelFormat, read_exact

_RECT_HEADER = struct.Struct(">HHHHi")
_COLOR = struct.Struct(">HHH")


class _Connection(Protocol):
    pixel_format: PixelFormat
    color_map: MutableSequence[Color]
    encodings: Sequence[Encoding]


class ServerMessage(ABC):
    """A message from the server; its type byte has already been consumed."""

    message_type: ClassVar[int]

    @classmethod
    @abstractmethod
    def read(cls, conn: _Connection, stream: BinaryIO) -> ServerMessage:
        """Read the body of the message from *stream*."""


@dataclass
class FramebufferUpdateMessage(ServerMessage):
    """A sequence of rectangles of pixel data for the framebuffer."""

    message_type: ClassVar[int] = 0

    rectangles: list[Rectangle] = field(default_factory=list)

    @classmethod
    def read(cls, conn: _Connection, stream: BinaryIO) -> FramebufferUpdateMessage:
        read_exact(stream, 1)
        (count,) = struct.unpack(">H", read_exact(stream, 2))

        encodings = {enc.encoding_type: enc for enc in conn.encodings}
        encodings[RawEncoding.encoding_type] = RawEncoding()

        rectangles = []
        for _ in range(count):
            x, y, width, height, enc_type = _RECT_HEADER.unpack(read_exact(stream, _RECT_HEADER.size))
            enc = encodings.get(enc_type)
            if enc is None:
                raise ValueError(f"unsupported encoding type: {enc_type}")
            rect = Rectangle(x, y, width, height)
            rect.enc = enc.read(conn, rect, stream)
            rectangles.append(rect)
        return cls(rectangles)


@dataclass
class SetColorMapEntriesMessage(ServerMessage):
    """New colour map entries; the connection's colour map is updated on read."""

    message_type: ClassVar[int] = 1

    first_color: int = 0
    colors: list[Color] = field(default_factory=list)

    @classmethod
    def read(cls, conn: _Connection, stream: BinaryIO) -> SetColorMapEntriesMessage:
        read_exact(stream, 1)
        first, count = struct.unpack(">HH", read_exact(stream, 4))
        colors = []
        for offset in range(count):
            color = Color(*_COLOR.unpack(read_exact(stream, _COLOR.size)))
            index = (first + offset) & 0xFFFF
            if index >= len(conn.color_map):
                raise ValueError(f"colour map index {index} out of range")
            conn.color_map[index] = color
            colors.append(color)
        return cls(first, colors)


@dataclass
class BellMessage(ServerMessage):
    """The client should ring its bell."""

    message_type: ClassVar[int] = 2

    @classmethod
    def read(cls, conn: _Connection, stream: BinaryIO) -> BellMessage:
        return cls()


@dataclass
class ServerCutTextMessage(ServerMessage):
    """The server has new Latin-1 text in its cut buffer."""

    message_type: ClassVar[int] = 3

    text: str = ""

    @classmethod
    def read(cls, conn: _Connection, stream: BinaryIO) -> ServerCutTextMessage:
        read_exact(stream, 3)
        (length,) = struct.unpack(">I", read_exact(stream, 4))
        return cls(read_exact(stream, length).decode("latin-1"))


DEFAULT_MESSAGES: tuple[type[ServerMessage], ...] = (
    FramebufferUpdateMessage,
    SetColorMapEntriesMessage,
    BellMessage,
    ServerCutTextMessage,
)
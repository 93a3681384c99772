"""Authentication schemes for the remote framebuffer protocol handshake."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from Crypto.Cipher import DES

from mediadrivers.vnc.pixels import read_exact

CHALLENGE_SIZE = 16
_KEY_SIZE = 8
_REVERSED = bytes(int(f"{i:08b}"[::-1], 2) for i in range(256))


def reverse_bits(value: int) -> int:
    """Return the byte *value* with its bit order reversed."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{value} is not a byte value")
    return _REVERSED[value]


def _send(stream: Any, data: bytes) -> None:
    stream.write(data)
    flush = getattr(stream, "flush", None)
    if callable(flush):
        flush()


class ClientAuth(ABC):
    """A way of authenticating with the server."""

    security_type: ClassVar[int]

    @abstractmethod
    def handshake(self, stream: Any) -> None:
        """Run this scheme's part of the security handshake over *stream*."""


@dataclass(frozen=True)
class ClientAuthNone(ClientAuth):
    """No authentication."""

    security_type: ClassVar[int] = 1

    def handshake(self, stream: Any) -> None:
        return None


@dataclass(frozen=True)
class PasswordAuth(ClientAuth):
    """Challenge-response authentication with a DES-encrypted challenge."""

    security_type: ClassVar[int] = 2

    password: str = field(default="", repr=False)

    def _key(self) -> bytes:
        raw = self.password.encode("utf-8")[:_KEY_SIZE]
        return bytes(reverse_bits(b) for b in raw).ljust(_KEY_SIZE, b"\0")

    def encrypt(self, challenge: bytes) -> bytes:
        """Encrypt the first 16 bytes of *challenge* with the password as key."""
        if len(challenge) < CHALLENGE_SIZE:
            raise ValueError(
                f"challenge must hold {CHALLENGE_SIZE} bytes, got {len(challenge)}"
            )
        cipher = DES.new(self._key(), DES.MODE_ECB)
        return cipher.encrypt(bytes(challenge[:CHALLENGE_SIZE]))

    def handshake(self, stream: Any) -> None:
        challenge = read_exact(stream, CHALLENGE_SIZE)
        _send(stream, self.encrypt(challenge))
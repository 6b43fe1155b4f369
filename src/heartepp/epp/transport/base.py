from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


class TransportError(Exception):
    """
    Connection level failure.

    `stage` names where it happened: "connect", "tls", "hostname-verify",
    "send", "receive" or "closed".
    """

    def __init__(self, message: str, *, stage: str = "connect") -> None:
        super().__init__(message)
        self.stage = stage


class TransportTimeout(TransportError):
    pass


class FramingError(Exception):
    """Malformed length prefix or a stream that ended mid-frame."""


class Framing(Protocol):
    """
    Transport framing is responsible only for:
    - turning raw XML payload bytes into framed bytes (encode)
    - reading framed bytes and extracting a raw payload (decode)
    """

    def encode(self, payload: bytes) -> bytes: ...
    def decode_from_buffer(self, buffer: bytearray) -> bytes | None: ...
    def read_frame(self, read: Callable[[int], bytes]) -> bytes: ...


@dataclass(frozen=True, slots=True)
class Endpoint:
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"

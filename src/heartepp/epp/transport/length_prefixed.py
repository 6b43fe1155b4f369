from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import BinaryIO

from heartepp.core.bytes import read_uint_be, write_uint_be

from .base import FramingError

HEADER_SIZE = 4


@dataclass(frozen=True, slots=True)
class LengthPrefixedFraming:
    """
    EPP over TCP framing.

    Frame format:
    - 4-byte big-endian unsigned length, counting the header itself
    - followed by (length - 4) payload bytes

    No upper bound is enforced here.
    """

    def encode(self, payload: bytes) -> bytes:
        return write_uint_be(len(payload) + HEADER_SIZE) + payload

    def frame_length(self, header: bytes) -> int:
        if len(header) != HEADER_SIZE:
            raise FramingError(f"Frame header must be {HEADER_SIZE} bytes, got {len(header)}")
        ln = read_uint_be(header)
        if ln < HEADER_SIZE:
            raise FramingError(f"Frame length smaller than its header: {ln}")
        return ln

    def decode_from_buffer(self, buffer: bytearray) -> bytes | None:
        if len(buffer) < HEADER_SIZE:
            return None
        total = self.frame_length(bytes(buffer[:HEADER_SIZE]))
        if len(buffer) < total:
            return None
        payload = bytes(buffer[HEADER_SIZE:total])
        del buffer[:total]
        return payload

    def read_frame(self, read: Callable[[int], bytes]) -> bytes:
        """
        Read exactly one frame using `read(n)`, which returns at most n bytes
        and b"" at end of stream.
        """

        header = _read_exactly(read, HEADER_SIZE)
        total = self.frame_length(header)
        return _read_exactly(read, total - HEADER_SIZE)


def _read_exactly(read: Callable[[int], bytes], n: int) -> bytes:
    out = bytearray()
    while len(out) < n:
        chunk = read(n - len(out))
        if not chunk:
            raise FramingError(f"Stream ended after {len(out)} of {n} expected bytes")
        out.extend(chunk)
    return bytes(out)


DEFAULT_FRAMING = LengthPrefixedFraming()


def encode(payload: bytes) -> bytes:
    return DEFAULT_FRAMING.encode(payload)


def decode(stream: BinaryIO) -> bytes:
    return DEFAULT_FRAMING.read_frame(stream.read)

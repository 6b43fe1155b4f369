from __future__ import annotations

import struct


class BytesError(Exception):
    pass


def read_uint_be(data: bytes, offset: int = 0) -> int:
    if offset < 0 or offset + 4 > len(data):
        raise BytesError("read_uint_be out of bounds")
    return int(struct.unpack_from("!I", data, offset)[0])


def write_uint_be(value: int) -> bytes:
    if value < 0 or value >= 1 << 32:
        raise BytesError(f"write_uint_be value out of range: {value}")
    return struct.pack("!I", int(value))

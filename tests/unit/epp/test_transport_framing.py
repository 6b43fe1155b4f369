from __future__ import annotations

import io

import pytest

from heartepp.epp.transport.base import FramingError
from heartepp.epp.transport.length_prefixed import LengthPrefixedFraming, decode, encode


def test_encode_prefixes_big_endian_length_including_header() -> None:
    framed = encode(b"<epp/>")
    assert framed[:4] == b"\x00\x00\x00\x0a"
    assert framed[4:] == b"<epp/>"


@pytest.mark.parametrize("size", [0, 1, 4096, 65535])
def test_decode_returns_encoded_payload(size: int) -> None:
    payload = bytes(i % 251 for i in range(size))
    assert decode(io.BytesIO(encode(payload))) == payload


def test_decode_reads_one_frame_and_leaves_the_next() -> None:
    stream = io.BytesIO(encode(b"first") + encode(b"second"))
    assert decode(stream) == b"first"
    assert decode(stream) == b"second"


def test_truncated_payload_raises_framing_error() -> None:
    framed = encode(b"<epp><response/></epp>")
    with pytest.raises(FramingError):
        decode(io.BytesIO(framed[:-3]))


def test_truncated_header_raises_framing_error() -> None:
    with pytest.raises(FramingError):
        decode(io.BytesIO(b"\x00\x00"))


def test_length_below_header_size_is_rejected() -> None:
    with pytest.raises(FramingError):
        decode(io.BytesIO(b"\x00\x00\x00\x03abc"))


def test_read_frame_handles_short_reads() -> None:
    framed = encode(b"<epp>hello</epp>")
    pos = 0

    def read(n: int) -> bytes:
        nonlocal pos
        chunk = framed[pos : pos + 1]
        pos += len(chunk)
        return chunk

    assert LengthPrefixedFraming().read_frame(read) == b"<epp>hello</epp>"


def test_decode_from_buffer_partial() -> None:
    f = LengthPrefixedFraming()
    framed = f.encode(b"<epp/>")
    buf = bytearray(framed[:3])
    assert f.decode_from_buffer(buf) is None
    buf.extend(framed[3:])
    assert f.decode_from_buffer(buf) == b"<epp/>"
    assert buf == bytearray()

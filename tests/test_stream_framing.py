import sys

import pytest

from framing_errors import ConfigurationError, InvalidFrameSize
from stream_framing import (
    MIN_FRAME_SIZE,
    PREFIX_SIZE,
    decode_prefix,
    deframe,
    encode_prefix,
    frame_bytes,
    resolve_byteorder,
)


def test_frame_deframe_roundtrip():
    payload = b"abc" * 10
    framed = frame_bytes(payload)
    frames, rem = deframe(framed)
    assert rem == b""
    assert frames[0] == payload


def test_prefix_counts_itself_in_host_order():
    framed = frame_bytes(b"x" * 32)
    assert framed[:PREFIX_SIZE] == (36).to_bytes(4, sys.byteorder)
    assert len(framed) == 36


def test_explicit_byte_order():
    framed = frame_bytes(b"y" * 28, byteorder="big")
    assert framed[:4] == b"\x00\x00\x00\x20"
    assert decode_prefix(framed[:4], "network") == MIN_FRAME_SIZE
    assert decode_prefix(encode_prefix(40, "little"), "little") == 40


def test_prefix_is_signed():
    assert decode_prefix(b"\xff\xff\xff\xff") == -1


def test_short_payload_rejected():
    with pytest.raises(InvalidFrameSize) as exc:
        frame_bytes(b"z" * 27)
    assert exc.value.size == 31


def test_deframe_keeps_incomplete_tail():
    first = frame_bytes(b"a" * 30)
    second = frame_bytes(b"b" * 40)
    frames, rem = deframe(first + second[:10])
    assert frames == [b"a" * 30]
    assert rem == second[:10]


def test_deframe_rejects_small_prefix():
    with pytest.raises(InvalidFrameSize):
        deframe(encode_prefix(8) + b"\x00" * 8)


def test_unknown_byte_order():
    with pytest.raises(ConfigurationError):
        resolve_byteorder("middle")

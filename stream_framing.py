# stream_framing.py
"""
Length-prefixed framing: 4-byte total length (prefix included) followed by
the payload. The prefix uses host byte order unless told otherwise.
"""
from __future__ import annotations

import sys
from typing import List, Tuple

from framing_errors import ConfigurationError, InvalidFrameSize

PREFIX_SIZE = 4
MIN_FRAME_SIZE = 32

_BYTEORDERS = {
    "native": sys.byteorder,
    "host": sys.byteorder,
    "big": "big",
    "network": "big",
    "little": "little",
}


def resolve_byteorder(name: str) -> str:
    try:
        return _BYTEORDERS[str(name).lower()]
    except KeyError:
        raise ConfigurationError(f"unknown byte order: {name}") from None


def encode_prefix(total_length: int, byteorder: str = "native") -> bytes:
    return int(total_length).to_bytes(PREFIX_SIZE, resolve_byteorder(byteorder), signed=True)


def decode_prefix(prefix: bytes, byteorder: str = "native") -> int:
    if len(prefix) != PREFIX_SIZE:
        raise ValueError(f"prefix must be {PREFIX_SIZE} bytes, got {len(prefix)}")
    return int.from_bytes(prefix, resolve_byteorder(byteorder), signed=True)


def frame_bytes(payload: bytes, byteorder: str = "native") -> bytes:
    total = len(payload) + PREFIX_SIZE
    if total < MIN_FRAME_SIZE:
        raise InvalidFrameSize(total, MIN_FRAME_SIZE)
    return encode_prefix(total, byteorder) + bytes(payload)


def deframe(buffer: bytes, byteorder: str = "native") -> Tuple[List[bytes], bytes]:
    frames: List[bytes] = []
    offset = 0
    while True:
        if len(buffer) - offset < PREFIX_SIZE:
            break
        length = decode_prefix(buffer[offset:offset + PREFIX_SIZE], byteorder)
        if length < MIN_FRAME_SIZE:
            raise InvalidFrameSize(length, MIN_FRAME_SIZE)
        if len(buffer) - offset < length:
            break
        start = offset + PREFIX_SIZE
        end = offset + length
        frames.append(bytes(buffer[start:end]))
        offset = end
    return frames, bytes(buffer[offset:])

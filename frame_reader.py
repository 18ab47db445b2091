# frame_reader.py
"""
Blocking reader for length-prefixed frames on a stream socket.

Each frame is a 4-byte length prefix (total frame length, prefix included)
followed by ``length - 4`` payload bytes. The prefix is decoded in host byte
order unless the reader is built with an explicit byte order.

A reader is bound to one connection and must only be used by one caller at a
time: the prefix buffer is reused across calls and concurrent calls would
interleave prefix and payload reads.
"""
from __future__ import annotations

import json
import logging
import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from framing_errors import FrameTooLarge, InvalidFrameSize, StreamDesynchronized
from stream_framing import MIN_FRAME_SIZE, PREFIX_SIZE, decode_prefix, resolve_byteorder

logger = logging.getLogger("frame_reader")

PAYLOAD = "payload"
CLOSED = "closed"
TIMEOUT = "timeout"

CLOSED_SENTINEL = b"\xff"
TIMEOUT_SENTINEL = b""


@dataclass(frozen=True)
class ReadResult:
    kind: str
    payload: bytes = b""
    consumed: int = 0

    @property
    def closed(self) -> bool:
        return self.kind == CLOSED

    @property
    def timed_out(self) -> bool:
        return self.kind == TIMEOUT

    def to_message(self) -> bytes:
        """Collapse into the in-band form returned by ``read_message``."""
        if self.kind == CLOSED:
            return CLOSED_SENTINEL
        if self.kind == TIMEOUT:
            return TIMEOUT_SENTINEL
        return self.payload


def _to_seconds(timeout_ms: int) -> Optional[float]:
    if timeout_ms < 0:
        raise ValueError(f"timeout_ms must be >= 0, got {timeout_ms}")
    # 0 blocks indefinitely
    return None if timeout_ms == 0 else timeout_ms / 1000.0


class FrameReader:
    def __init__(self, connection: socket.socket, byteorder: str = "native", max_frame_size: int = 0) -> None:
        self._conn = connection
        self._baseline = connection.gettimeout()
        self._byteorder = resolve_byteorder(byteorder)
        # 0 leaves frame size unbounded
        self._max_frame_size = max_frame_size
        self._prefix = bytearray(PREFIX_SIZE)
        self._consumed = 0

    @property
    def baseline_timeout(self) -> Optional[float]:
        """Timeout (seconds, ``None`` for blocking) captured at construction."""
        return self._baseline

    @contextmanager
    def _deadline(self, timeout_ms: int):
        wanted = _to_seconds(timeout_ms)
        override = wanted != self._baseline
        if override:
            self._conn.settimeout(wanted)
        try:
            yield
        finally:
            if override:
                self._conn.settimeout(self._baseline)

    def _recv_exactly(self, view: memoryview) -> None:
        got = 0
        while got < len(view):
            n = self._conn.recv_into(view[got:], len(view) - got)
            if n == 0:
                raise EOFError(f"stream closed after {got}/{len(view)} bytes")
            got += n
            self._consumed += n

    def read_frame(self, timeout_ms: int = 0) -> ReadResult:
        """Read one frame, reporting close and timeout as result kinds.

        The same ``timeout_ms`` deadline is installed for the prefix read and
        the payload read. It applies to each receive, so a peer trickling
        bytes can keep the call going past it. When a close or timeout hits
        part-way through a frame, ``consumed`` tells how many bytes were taken
        off the stream and lost.
        Raises :class:`InvalidFrameSize` for prefixes below the minimum frame
        size and :class:`FrameTooLarge` for prefixes above ``max_frame_size``
        (checked before the payload buffer is allocated); other socket errors
        propagate.
        """
        self._consumed = 0
        with self._deadline(timeout_ms):
            try:
                self._recv_exactly(memoryview(self._prefix))
                size = decode_prefix(bytes(self._prefix), self._byteorder)
                if size < MIN_FRAME_SIZE:
                    raise InvalidFrameSize(size, MIN_FRAME_SIZE)
                if self._max_frame_size and size > self._max_frame_size:
                    raise FrameTooLarge(size, self._max_frame_size)
                payload = bytearray(size - PREFIX_SIZE)
                self._recv_exactly(memoryview(payload))
            except EOFError:
                self._note_loss(CLOSED)
                return ReadResult(CLOSED, consumed=self._consumed)
            except socket.timeout:
                self._note_loss(TIMEOUT)
                return ReadResult(TIMEOUT, consumed=self._consumed)

        logger.debug(json.dumps({"event": "frame", "size": size}))
        return ReadResult(PAYLOAD, bytes(payload), self._consumed)

    def read_message(self, timeout_ms: int = 0) -> bytes:
        """Read one frame and return its payload.

        Returns ``b"\\xff"`` when the peer closed the stream and ``b""`` when
        ``timeout_ms`` elapsed first. These sentinels cannot be told apart
        from genuine payloads by content; use :meth:`read_frame` to get an
        explicit result kind.
        """
        return self.read_frame(timeout_ms).to_message()

    def iter_messages(self, timeout_ms: int = 0) -> Iterator[bytes]:
        """Yield payloads until the peer closes the stream.

        Idle timeouts are skipped. A timeout part-way through a frame raises
        :class:`StreamDesynchronized`.
        """
        while True:
            result = self.read_frame(timeout_ms)
            if result.closed:
                return
            if result.timed_out:
                if result.consumed:
                    raise StreamDesynchronized(result.consumed)
                continue
            yield result.payload

    def _note_loss(self, kind: str) -> None:
        if self._consumed:
            logger.warning(json.dumps({"event": "partial_frame", "kind": kind, "discarded": self._consumed}))

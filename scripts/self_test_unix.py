#!/usr/bin/env python3
"""
End-to-end local self-test using socketpair (bind-free; works in locked sandboxes).
- Writer thread sends framed messages, then closes
- FrameReader reads them back with a deadline
- Verifies payloads, the closed sentinel and deadline restoration
"""
from __future__ import annotations

import os
import socket
import threading

from frame_reader import FrameReader
from stream_framing import frame_bytes


def main():
    r_sock, w_sock = socket.socketpair()
    r_sock.settimeout(3.0)
    msgs = [os.urandom(28), os.urandom(500), b"hello-frame-reader".ljust(64, b".")]

    def writer():
        for msg in msgs:
            w_sock.sendall(frame_bytes(msg))
        w_sock.close()

    t = threading.Thread(target=writer, daemon=True)
    t.start()

    reader = FrameReader(r_sock)
    for i, msg in enumerate(msgs):
        out = reader.read_message(1000)
        if out != msg:
            raise SystemExit(f"self-test failed: frame {i} mismatch")
    if reader.read_message(1000) != b"\xff":
        raise SystemExit("self-test failed: expected closed sentinel")
    if r_sock.gettimeout() != 3.0:
        raise SystemExit("self-test failed: deadline not restored")
    r_sock.close()

    print("[OK] unix self-test passed")


if __name__ == "__main__":
    main()

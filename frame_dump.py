#!/usr/bin/env python3
"""
Connect to a peer and log every length-prefixed frame it sends.
Optionally appends each outcome to a sealed capture log.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import socket
from typing import List, Optional

import yaml

from frame_capture import FrameCapture
from frame_reader import FrameReader
from framing_errors import ConfigurationError, FramingError, InvalidFrameSize, StreamDesynchronized
from reader_profiles import Profile, load_profiles

LOG_KEY_ENV = "FRAMEDUMP_LOG_KEY"


def open_capture(profile: Profile) -> Optional[FrameCapture]:
    if not profile.capture_enabled:
        return None
    key_hex = os.environ.get(LOG_KEY_ENV, "")
    if not key_hex:
        logging.warning(json.dumps({"event": "capture_disabled", "reason": f"{LOG_KEY_ENV} not set"}))
        return None
    return FrameCapture(profile.capture_path, bytes.fromhex(key_hex))


def dump_frames(conn, profile: Profile, peer: str, timeout_ms: int, max_idle: int = 0,
                capture: Optional[FrameCapture] = None) -> int:
    """Read frames until the peer closes or ``max_idle`` timeouts in a row. Returns frame count.

    Raises :class:`StreamDesynchronized` when a read times out part-way
    through a frame; the connection must not be read again.
    """
    reader = FrameReader(conn, byteorder=profile.byte_order, max_frame_size=profile.max_frame_size)
    meta = {"profile_id": profile.profile_id, "profile_hash": profile.profile_hash, "peer": peer}
    frames = 0
    idle = 0
    while True:
        result = reader.read_frame(timeout_ms)
        if capture:
            capture.write(meta, result.kind, result.payload)
        if result.closed:
            logging.info(json.dumps({"event": "closed", "peer": peer, "frames": frames, "discarded": result.consumed}))
            return frames
        if result.timed_out and result.consumed:
            logging.error(json.dumps({"event": "desync", "peer": peer, "frames": frames, "discarded": result.consumed}))
            raise StreamDesynchronized(result.consumed)
        if result.timed_out:
            idle += 1
            logging.debug(json.dumps({"event": "idle", "peer": peer, "idle": idle, "discarded": result.consumed}))
            if max_idle and idle >= max_idle:
                logging.info(json.dumps({"event": "idle_limit", "peer": peer, "frames": frames}))
                return frames
            continue
        idle = 0
        frames += 1
        logging.info(json.dumps({"event": "frame", "peer": peer, "seq": frames, "size": len(result.payload),
                                 "head": result.payload[:16].hex()}))


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--connect", required=True, help="peer host:port")
    ap.add_argument("--profile", default="default")
    ap.add_argument("--profiles", default="profiles")
    ap.add_argument("--timeout-ms", type=int, default=None, help="per-read deadline (0 = block)")
    ap.add_argument("--max-idle", type=int, default=0, help="stop after N consecutive timeouts (0 = never)")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    try:
        profiles = load_profiles(args.profiles)
    except (OSError, ValueError, ConfigurationError, yaml.YAMLError) as e:
        raise SystemExit(f"cannot load profiles: {e}")
    if args.profile not in profiles:
        raise SystemExit(f"unknown profile: {args.profile}")
    profile = profiles[args.profile]
    timeout_ms = profile.timeout_ms if args.timeout_ms is None else args.timeout_ms

    try:
        host, port = args.connect.rsplit(":", 1)
        port = int(port)
    except ValueError:
        raise SystemExit(f"bad --connect address: {args.connect}")
    try:
        capture = open_capture(profile)
    except (OSError, ValueError) as e:
        raise SystemExit(f"cannot open capture log: {e}")
    try:
        sock = socket.create_connection((host, port))
    except OSError as e:
        raise SystemExit(f"cannot connect to {args.connect}: {e}")
    try:
        dump_frames(sock, profile, args.connect, timeout_ms, args.max_idle, capture)
    except InvalidFrameSize as e:
        logging.error(json.dumps({"event": "invalid_frame", "peer": args.connect, "size": e.size}))
        return 2
    except FramingError as e:
        logging.error(json.dumps({"event": "frame_error", "peer": args.connect, "error": str(e)}))
        return 2
    finally:
        sock.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

# frame_capture.py
"""
Sealed, hash-chained capture log of frames received by a reader.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
import time
from dataclasses import dataclass
from typing import Any, Dict

from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

AAD = b"frame-capture"


@dataclass
class CaptureRecord:
    ts: float
    seq: int
    profile_id: str
    profile_hash: str
    peer: str
    kind: str
    size: int
    payload_hash: str
    chain_hash: str


def capture_nonce(log_key: bytes, chain: bytes, seq: int) -> bytes:
    return hmac.new(log_key, chain + seq.to_bytes(8, "big"), hashlib.sha256).digest()[:12]


def canonical_json(obj: Dict[str, Any]) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8")


class FrameCapture:
    def __init__(self, log_path: str, log_key: bytes) -> None:
        if len(log_key) != 32:
            raise ValueError("capture log key must be 32 bytes")
        self.log_path = log_path
        self._log_key = log_key
        self._aead = ChaCha20Poly1305(log_key)
        self._seq = 0
        self._chain = b"\x00" * 32
        parent = os.path.dirname(log_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

    def write(self, meta: Dict[str, Any], kind: str, payload: bytes = b"") -> CaptureRecord:
        self._seq += 1
        chain_prev = self._chain
        record = {
            "ts": time.time(),
            "seq": self._seq,
            "profile_id": meta.get("profile_id"),
            "profile_hash": meta.get("profile_hash"),
            "peer": meta.get("peer"),
            "kind": kind,
            "size": len(payload),
            "payload_hash": hashlib.sha256(payload).hexdigest(),
            "chain_prev": chain_prev.hex(),
        }
        self._chain = hashlib.sha256(chain_prev + canonical_json(record)).digest()
        record["chain_hash"] = self._chain.hex()

        nonce = capture_nonce(self._log_key, chain_prev, self._seq)
        sealed = self._aead.encrypt(nonce, json.dumps(record).encode("utf-8"), AAD)

        with open(self.log_path, "ab") as f:
            f.write(base64.b64encode(sealed) + b"\n")

        return CaptureRecord(
            ts=record["ts"],
            seq=self._seq,
            profile_id=record["profile_id"],
            profile_hash=record["profile_hash"],
            peer=record["peer"],
            kind=kind,
            size=record["size"],
            payload_hash=record["payload_hash"],
            chain_hash=record["chain_hash"],
        )

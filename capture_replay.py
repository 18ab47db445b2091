#!/usr/bin/env python3
"""
Verify and replay sealed frame capture logs. Validates AEAD and hash-chain integrity.
"""
from __future__ import annotations

import argparse
import base64
import hashlib
import json
from typing import List, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from frame_capture import AAD, canonical_json, capture_nonce


def verify_log(log_path: str, log_key: bytes, limit: int = 0) -> int:
    """Return the number of verified records; raise ValueError on the first bad one."""
    aead = ChaCha20Poly1305(log_key)
    chain = b"\x00" * 32
    count = 0

    with open(log_path, "rb") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            count += 1
            nonce = capture_nonce(log_key, chain, count)
            try:
                record_bytes = aead.decrypt(nonce, base64.b64decode(line), AAD)
            except (InvalidTag, ValueError):
                raise ValueError(f"record {count}: AEAD decrypt failed") from None

            record = json.loads(record_bytes.decode("utf-8"))
            if bytes.fromhex(record.get("chain_prev", "")) != chain:
                raise ValueError(f"record {count}: chain_prev mismatch")

            # recompute chain hash from the record sans chain_hash
            record_for_hash = dict(record)
            record_for_hash.pop("chain_hash", None)
            chain = hashlib.sha256(chain + canonical_json(record_for_hash)).digest()
            if record.get("chain_hash") != chain.hex():
                raise ValueError(f"record {count}: chain_hash mismatch")

            if limit and count <= limit:
                print(json.dumps(record, indent=2, sort_keys=True))
    return count


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--log", required=True, help="path to frame_capture.log")
    ap.add_argument("--log-key-hex", required=True, help="hex-encoded 32-byte log key")
    ap.add_argument("--limit", type=int, default=0, help="max records to print (0 = none)")
    args = ap.parse_args(argv)

    try:
        count = verify_log(args.log, bytes.fromhex(args.log_key_hex), args.limit)
    except ValueError as e:
        print(f"[FAIL] {e}")
        return 1
    print(f"[OK] verified {count} records")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

import os

import pytest

from capture_replay import main as replay_main
from capture_replay import verify_log
from frame_capture import FrameCapture

META = {"profile_id": "default", "profile_hash": "x", "peer": "127.0.0.1:9000"}


def test_capture_log_sealed_and_chained(tmp_path):
    log_key = os.urandom(32)
    log_path = tmp_path / "logs" / "frame_capture.log"
    capture = FrameCapture(str(log_path), log_key)
    first = capture.write(META, "payload", b"p" * 28)
    second = capture.write(META, "timeout")
    assert first.seq == 1 and second.seq == 2
    assert first.size == 28 and second.size == 0
    assert first.chain_hash != second.chain_hash
    assert b"payload" not in log_path.read_bytes()
    assert verify_log(str(log_path), log_key) == 2


def test_tampered_record_fails(tmp_path):
    log_key = os.urandom(32)
    log_path = tmp_path / "frame_capture.log"
    capture = FrameCapture(str(log_path), log_key)
    capture.write(META, "payload", b"a" * 30)
    capture.write(META, "closed")
    lines = log_path.read_bytes().splitlines()
    log_path.write_bytes(lines[1] + b"\n" + lines[0] + b"\n")
    with pytest.raises(ValueError, match="record 1"):
        verify_log(str(log_path), log_key)


def test_replay_cli(tmp_path, capsys):
    log_key = os.urandom(32)
    log_path = tmp_path / "frame_capture.log"
    FrameCapture(str(log_path), log_key).write(META, "payload", b"c" * 40)
    assert replay_main(["--log", str(log_path), "--log-key-hex", log_key.hex(), "--limit", "1"]) == 0
    out = capsys.readouterr().out
    assert "[OK] verified 1 records" in out
    assert '"kind": "payload"' in out
    assert replay_main(["--log", str(log_path), "--log-key-hex", os.urandom(32).hex()]) == 1


def test_key_length_checked(tmp_path):
    with pytest.raises(ValueError):
        FrameCapture(str(tmp_path / "c.log"), b"short")

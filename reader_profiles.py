# reader_profiles.py
"""
Load YAML reader profiles and provide deterministic profile hashing.
"""
from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from typing import Any, Dict

import yaml

from framing_errors import ConfigurationError
from stream_framing import resolve_byteorder


@dataclass(frozen=True)
class Profile:
    profile_id: str
    raw: Dict[str, Any]
    profile_hash: str

    @property
    def byte_order(self) -> str:
        return str(self.raw.get("byte_order", "native"))

    @property
    def timeout_ms(self) -> int:
        return int(self.raw.get("timeout_ms", 0))

    @property
    def max_frame_size(self) -> int:
        return int(self.raw.get("max_frame_size", 0))

    @property
    def capture_enabled(self) -> bool:
        return bool(self.raw.get("capture", {}).get("enabled", False))

    @property
    def capture_path(self) -> str:
        return str(self.raw.get("capture", {}).get("path", "logs/frame_capture.log"))


def _canonical_json(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"))


def _validate(profile_id: str, raw: Dict[str, Any]) -> None:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"profile {profile_id}: expected a mapping")
    resolve_byteorder(raw.get("byte_order", "native"))
    for key in ("timeout_ms", "max_frame_size"):
        value = raw.get(key, 0)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ConfigurationError(f"profile {profile_id}: '{key}' must be a non-negative integer")
    capture = raw.get("capture", {})
    if not isinstance(capture, dict):
        raise ConfigurationError(f"profile {profile_id}: 'capture' must be a mapping")


def load_profiles(profiles_dir: str) -> Dict[str, Profile]:
    profiles: Dict[str, Profile] = {}
    if not os.path.isdir(profiles_dir):
        raise FileNotFoundError(f"profiles directory not found: {profiles_dir}")

    for name in sorted(os.listdir(profiles_dir)):
        if not name.endswith((".yaml", ".yml")):
            continue
        path = os.path.join(profiles_dir, name)
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        profile_id = str((raw.get("profile_id") if isinstance(raw, dict) else None) or os.path.splitext(name)[0])
        _validate(profile_id, raw)
        profile_hash = hashlib.sha256(_canonical_json(raw).encode("utf-8")).hexdigest()
        profiles[profile_id] = Profile(profile_id=profile_id, raw=raw, profile_hash=profile_hash)

    if not profiles:
        raise ValueError("no profiles loaded")
    return profiles

"""Content fingerprints for sources the platform does not echo back."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from elevenlabs_iac.exceptions import LocalIOError

_CHUNK_SIZE = 64 * 1024


def content_hash(data: bytes | str) -> str:
    """Return the SHA-256 hex digest of ``data`` (strings are UTF-8 encoded)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def file_hash(path: str | Path) -> str:
    """Stream ``path`` through SHA-256 and return the hex digest."""
    path = Path(path)
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as exc:
        raise LocalIOError(path, f"error hashing source file {path}: {exc}") from exc
    return digest.hexdigest()


def stable_id(value: Any) -> str:
    """Deterministic short id for a JSON-serialisable value."""
    canonical = json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    return content_hash(canonical)[:16]

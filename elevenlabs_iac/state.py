"""Persisted resource state: identifier plus last applied / observed config."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class StateRecord(BaseModel):
    """What is remembered about one managed resource between runs."""

    address: str
    kind: str
    id: str
    applied: dict[str, Any]
    observed: dict[str, Any] | None = None
    computed: dict[str, Any] = {}


class StateStore:
    """Address-keyed state records, optionally backed by a JSON file.

    With ``path=None`` records live in memory only.
    """

    def __init__(self, path: Path | str | None = None):
        self._path = Path(path) if path is not None else None
        self._records: dict[str, StateRecord] = self._load()

    def _load(self) -> dict[str, StateRecord]:
        if self._path is None or not self._path.exists():
            return {}
        with open(self._path, encoding="utf-8") as f:
            data = json.load(f)
        records = {
            address: StateRecord(**record)
            for address, record in data.get("resources", {}).items()
        }
        logger.info("Loaded %d resource(s) from %s", len(records), self._path)
        return records

    def _save(self) -> None:
        if self._path is None:
            return
        data = {
            "resources": {
                address: record.model_dump(mode="json")
                for address, record in sorted(self._records.items())
            }
        }
        # Write to temp file in same directory, then rename for atomicity
        tmp_fd, tmp_path = tempfile.mkstemp(
            dir=self._path.parent, suffix=".tmp", prefix="state_"
        )
        try:
            with open(tmp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write("\n")
            Path(tmp_path).replace(self._path)
        except Exception:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get(self, address: str) -> StateRecord | None:
        record = self._records.get(address)
        return record.model_copy(deep=True) if record is not None else None

    def put(self, record: StateRecord) -> None:
        self._records[record.address] = record.model_copy(deep=True)
        self._save()

    def remove(self, address: str) -> None:
        if self._records.pop(address, None) is not None:
            self._save()

    def addresses(self) -> list[str]:
        return sorted(self._records)

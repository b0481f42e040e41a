from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class Record:
    id: int
    fields: dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


class RecordStore:
    """In-memory record store; ids are assigned 0, 1, 2, ... in push order.

    Safe to share between threads: id assignment and append happen under one
    lock, and a ``push_many`` batch always gets contiguous ids.
    """

    def __init__(self, name: str, fields: Iterable[str] = ()) -> None:
        self.name = name
        self.fields: list[str] = list(fields)
        self._records: list[Record] = []
        self._lock = threading.Lock()

    def _append(self, data: Mapping[str, Any]) -> int:
        rec = Record(id=len(self._records), fields=dict(data))
        self._records.append(rec)
        return rec.id

    def push(self, data: Mapping[str, Any]) -> int:
        with self._lock:
            return self._append(data)

    def push_many(self, rows: Iterable[Mapping[str, Any]]) -> list[int]:
        batch = list(rows)
        with self._lock:
            ids = [self._append(r) for r in batch]
            total = len(self._records)
        logger.debug("store %s: pushed %d records (total %d)", self.name, len(ids), total)
        return ids

    def get(self, record_id: int) -> Record:
        with self._lock:
            if record_id < 0 or record_id >= len(self._records):
                raise KeyError(f"{self.name}: no record with id {record_id}")
            return self._records[record_id]

    def all_records(self) -> list[Record]:
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def load_records(path: str | os.PathLike[str]) -> list[dict[str, Any]]:
    """Read records from a JSON array file or a JSON-lines file."""
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    stripped = text.lstrip()
    if stripped.startswith("["):
        rows = json.loads(text)
    else:
        rows = [json.loads(line) for line in text.splitlines() if line.strip()]
    if not all(isinstance(r, dict) for r in rows):
        raise ValueError(f"{p}: every record must be a JSON object")
    logger.info("loaded %d records from %s", len(rows), p)
    return rows

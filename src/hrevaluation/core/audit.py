"""Append-only audit trail of recorded outcomes."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pendulum


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict[str, Any]) -> None:
        entry = {"timestamp": pendulum.now("UTC").to_iso8601_string(), **record}
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, ensure_ascii=False, default=str))
            handle.write("\n")

import json
import secrets
import time
from pathlib import Path
from typing import Any

from app.core.config import history_path
from app.core.logging import get_logger

logger = get_logger("memoledger.repositories.history")

MAX_HISTORY_ENTRIES = 100


class HistoryRepository:
    """Rolling newest-first log of transfers issued through this service."""

    def __init__(self, path: Path | None = None, max_entries: int = MAX_HISTORY_ENTRIES) -> None:
        self.path = path or history_path()
        self.max_entries = max_entries
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def add(self, entry: dict[str, Any]) -> dict[str, Any]:
        now_ms = int(time.time() * 1000)
        record = {
            "id": f"{now_ms}{secrets.token_hex(5)[:9]}",
            "timestamp": now_ms,
            **entry,
        }
        try:
            entries = self._read()
            entries.insert(0, record)
            self._write(entries[: self.max_entries])
        except OSError as e:
            logger.error(f"Error saving transaction: {e}")
        return record

    def list_entries(self, limit: int | None = None) -> list[dict[str, Any]]:
        entries = self._read()
        return entries[:limit] if limit is not None else entries

    def clear(self) -> None:
        self._write([])

    def _read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"History file unreadable, starting empty: {e}")
            return []
        return data if isinstance(data, list) else []

    def _write(self, entries: list[dict[str, Any]]) -> None:
        self.path.write_text(json.dumps(entries, ensure_ascii=False, indent=2), encoding="utf-8")

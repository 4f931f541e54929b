"""
Recent extractions list, persisted to a small JSON file.

Only successful resolutions are recorded. An input URL that is already in the
list is not added again; the newest entry goes first and the list is capped.
"""
from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from loguru import logger


class HistoryService:
    """Keep the last few Google News URLs that resolved successfully."""

    def __init__(self, path: Path, max_entries: int = 5):
        self.path = Path(path)
        self.max_entries = max_entries
        self._lock = threading.Lock()

    def list_recent(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._load()

    def record(self, google_news_url: str, target_url: str) -> List[Dict[str, Any]]:
        """
        Add a successful extraction to the front of the list.

        Returns:
            The list after the update
        """
        with self._lock:
            entries = self._load()
            if any(entry.get("google_news_url") == google_news_url for entry in entries):
                return entries
            entries.insert(0, {
                "google_news_url": google_news_url,
                "target_url": target_url,
                "extracted_at": datetime.now().isoformat(),
            })
            entries = entries[: self.max_entries]
            self._save(entries)
            return entries

    def clear(self) -> None:
        with self._lock:
            self._save([])

    def _load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error(f"Failed to load recent extractions from {self.path}: {exc}")
            return []
        if not isinstance(data, list):
            logger.warning(f"Ignoring malformed recent extractions file: {self.path}")
            return []
        return [entry for entry in data if isinstance(entry, dict)][: self.max_entries]

    def _save(self, entries: List[Dict[str, Any]]) -> None:
        """Persist entries atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as handle:
                json.dump(entries, handle, ensure_ascii=False, indent=2)
            tmp_path.replace(self.path)
        except OSError as exc:
            logger.error(f"Failed to persist recent extractions to {self.path}: {exc}")
            tmp_path.unlink(missing_ok=True)

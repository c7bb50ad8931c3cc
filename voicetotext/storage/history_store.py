"""JSON-backed transcription history and usage statistics."""

import json
import logging
import threading
from dataclasses import asdict, replace
from datetime import datetime
from pathlib import Path
from typing import List

from ..models.history import TranscriptionEntry, TranscriptionStats

logger = logging.getLogger(__name__)

MAX_HISTORY_ENTRIES = 50


class HistoryStore:
    """Persistence collaborator: keeps the most recent transcriptions and stats.

    Entries are stored newest first in `<data_dir>/history.json`.
    """

    def __init__(self, data_dir: str = "./data", max_entries: int = MAX_HISTORY_ENTRIES):
        """Initialize history store and load any existing history.

        Args:
            data_dir: Base directory for stored data
            max_entries: Number of entries kept; older entries are dropped
        """
        self.data_dir = Path(data_dir)
        self.history_file = self.data_dir / "history.json"
        self.max_entries = max_entries
        self.lock = threading.Lock()

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.entries: List[TranscriptionEntry] = []
        self.stats = TranscriptionStats()
        self._load()

        logger.info(f"HistoryStore initialized with {len(self.entries)} entries from {self.history_file}")

    def append_history(self, entry: TranscriptionEntry) -> None:
        """Insert an entry at the front, update stats and save.

        Memory is only updated once the file is written, so a failed save
        leaves both unchanged.
        """
        with self.lock:
            entries = ([entry] + self.entries)[:self.max_entries]
            stats = replace(self.stats)
            stats.record(entry.duration_seconds, entry.text, entry.translated)
            self._save(entries, stats)
            self.entries = entries
            self.stats = stats

        logger.info(f"History entry saved: {entry.word_count} words, {entry.duration_seconds}s, mode={entry.mode}")

    def list_entries(self) -> List[TranscriptionEntry]:
        with self.lock:
            return list(self.entries)

    def clear(self) -> None:
        with self.lock:
            self._save([], self.stats)
            self.entries = []

    def _load(self) -> None:
        if not self.history_file.exists():
            return

        try:
            with open(self.history_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading history file {self.history_file}: {e}")
            return

        for item in data.get("entries", []):
            item['timestamp'] = datetime.fromisoformat(item['timestamp'])
            self.entries.append(TranscriptionEntry(**item))
        self.stats = TranscriptionStats(**data.get("stats", {}))

    def _save(self, entries: List[TranscriptionEntry], stats: TranscriptionStats) -> None:
        # Caller holds the lock.
        items = []
        for entry in entries:
            item = asdict(entry)
            item['timestamp'] = entry.timestamp.isoformat()
            items.append(item)

        data = {"entries": items, "stats": asdict(stats)}

        # Write to a temporary file first so a crash never leaves half a history
        tmp_file = self.history_file.with_suffix(".json.tmp")
        try:
            with open(tmp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            tmp_file.replace(self.history_file)
        except OSError as e:
            logger.error(f"Error saving history: {e}")
            raise

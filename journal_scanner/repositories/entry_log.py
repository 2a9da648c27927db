"""
In-memory log of the journal entries completed during a session
"""
import threading

from journal_scanner.services.exceptions import NotFoundError
from journal_scanner.shared.models import Entry


class EntryLog:
    """Append-only list of entries, most recent first"""

    def __init__(self):
        self._entries: list[Entry] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def append(self, entry: Entry):
        with self._lock:
            self._entries.insert(0, entry)

    def all(self) -> list[Entry]:
        with self._lock:
            return list(self._entries)

    def get(self, entry_id: str) -> Entry:
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
        raise NotFoundError(f"Entry {entry_id} not found")

    def search(self, query: str | None) -> list[Entry]:
        """Case-insensitive substring match on title, transcription and tags"""
        entries = self.all()
        needle = (query or '').strip().lower()
        if not needle:
            return entries
        return [
            entry for entry in entries
            if needle in entry.title.lower()
            or needle in entry.ocr_text.lower()
            or needle in entry.tags_text.lower()
        ]

"""Recently searched locations, persisted to a small JSON file."""
import json
import logging
from pathlib import Path
from typing import List


HISTORY_KEY = "skycast_search_history"
MAX_HISTORY = 5


class SearchHistory:
    """Most-recent-first list of locations, unique ignoring case."""

    def __init__(self, path: str = "skycast_history.json", max_items: int = MAX_HISTORY):
        self.path = Path(path)
        self.max_items = max_items
        self._items = self._load()

    def _load(self) -> List[str]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
            items = data.get(HISTORY_KEY, [])
        except (ValueError, AttributeError) as e:
            logging.error(f"Failed to parse history file {self.path}: {e}")
            return []
        if not isinstance(items, list):
            return []
        return [item for item in items if isinstance(item, str)][:self.max_items]

    def save(self) -> None:
        self.path.write_text(json.dumps({HISTORY_KEY: self._items}, indent=2))

    @property
    def items(self) -> List[str]:
        return list(self._items)

    def add(self, location: str) -> List[str]:
        """Move a location to the front, dropping older case-insensitive duplicates."""
        location = location.strip()
        if not location:
            return self.items
        filtered = [item for item in self._items if item.lower() != location.lower()]
        self._items = [location] + filtered[:self.max_items - 1]
        self.save()
        return self.items

    def clear(self) -> None:
        self._items = []
        if self.path.exists():
            self.path.unlink()

    def __len__(self) -> int:
        return len(self._items)

"""Bounded in-memory log of recent requests, newest first."""

from typing import List

from common.constants import CONNECTION_LOG_CAPACITY, TRACKED_PATH_PREFIXES
from common.types import ConnectionLogEntry


def is_tracked_path(path: str) -> bool:
    """Return True if requests to this path belong in the connection log."""
    return path.startswith(TRACKED_PATH_PREFIXES)


class ConnectionLog:
    """
    Ring buffer of the most recent ConnectionLogEntry records.

    Entries are prepended, and the oldest entry is evicted once the log
    holds more than ``capacity`` records.
    """

    def __init__(self, capacity: int = CONNECTION_LOG_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"Invalid log capacity: {capacity}")
        self.capacity = capacity
        self._entries: List[ConnectionLogEntry] = []

    def record(self, entry: ConnectionLogEntry) -> None:
        self._entries.insert(0, entry)
        del self._entries[self.capacity:]

    def snapshot(self) -> List[ConnectionLogEntry]:
        """Return a copy of the entries, newest first."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

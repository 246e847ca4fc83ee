"""Bounded, persisted conversation memory."""

import json
import logging
import sqlite3
from typing import Iterator, List, Optional

from pydantic import ValidationError

from .models import ConversationTurn
from .persistence import SnapshotStore

logger = logging.getLogger(__name__)


class MemoryStore:
    """
    Chronological log of conversation turns with FIFO eviction.

    The whole log is rewritten to the snapshot store after every append,
    so the persisted snapshot always mirrors the truncated in-memory list.
    """

    DEFAULT_CAPACITY = 50
    DEFAULT_KEY = "gbird-memory"

    def __init__(
        self,
        snapshots: SnapshotStore,
        key: str = DEFAULT_KEY,
        capacity: int = DEFAULT_CAPACITY
    ):
        """
        Initialize memory store.

        Args:
            snapshots: Persistence port holding the serialized log
            key: Snapshot name
            capacity: Maximum number of retained turns
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.snapshots = snapshots
        self.key = key
        self.capacity = capacity
        self._turns: List[ConversationTurn] = []

    def load(self) -> List[ConversationTurn]:
        """
        Replace the in-memory log with the persisted snapshot.

        A missing or unreadable snapshot leaves the store empty.
        """
        self._turns = []
        try:
            payload = self.snapshots.load(self.key)
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Could not read memory snapshot '{self.key}': {e}")
            return []

        if not payload:
            return []

        try:
            entries = json.loads(payload)
            if not isinstance(entries, list):
                raise ValueError("snapshot is not a list")
            turns = [ConversationTurn.from_snapshot(entry) for entry in entries]
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            logger.warning(f"Discarding corrupt memory snapshot '{self.key}': {e}")
            return []

        self._turns = turns[-self.capacity:]
        logger.info(f"Loaded {len(self._turns)} turns from memory snapshot")
        return list(self._turns)

    def append(self, turn: ConversationTurn) -> ConversationTurn:
        """Add a turn at the end, evict the oldest beyond capacity, persist."""
        self._turns.append(turn)
        if len(self._turns) > self.capacity:
            self._turns = self._turns[-self.capacity:]
        self.persist()
        return turn

    def persist(self):
        """Write the current contents to the snapshot store."""
        payload = json.dumps([turn.to_snapshot() for turn in self._turns])
        try:
            self.snapshots.save(self.key, payload)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to persist memory snapshot '{self.key}': {e}")

    def recent(self, limit: int) -> List[ConversationTurn]:
        """Most recent turns in chronological order."""
        if limit <= 0:
            return []
        return list(self._turns[-limit:])

    def latest_first(self, limit: int = 8) -> List[ConversationTurn]:
        """Most recent turns, newest first."""
        return list(reversed(self.recent(limit)))

    def clear(self):
        self._turns = []
        self.persist()

    @property
    def turns(self) -> List[ConversationTurn]:
        return list(self._turns)

    def last(self) -> Optional[ConversationTurn]:
        return self._turns[-1] if self._turns else None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(list(self._turns))

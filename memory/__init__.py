"""Memory system for conversation persistence."""

from .models import Channel, ConversationTurn, Speaker, agent_turn, user_turn
from .persistence import SnapshotStore, InMemorySnapshotStore, SQLiteSnapshotStore
from .store import MemoryStore

__all__ = [
    "Channel",
    "ConversationTurn",
    "Speaker",
    "agent_turn",
    "user_turn",
    "SnapshotStore",
    "InMemorySnapshotStore",
    "SQLiteSnapshotStore",
    "MemoryStore",
]

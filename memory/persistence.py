"""Key/value snapshot persistence for on-device state."""

import sqlite3
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class SnapshotStore(ABC):
    """Port for named snapshots of serialized state."""

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """
        Read a snapshot.

        Args:
            key: Snapshot name

        Returns:
            Serialized payload, or None if nothing was saved under the key
        """
        pass

    @abstractmethod
    def save(self, key: str, payload: str):
        """Write (replace) a snapshot."""
        pass

    @abstractmethod
    def delete(self, key: str):
        """Remove a snapshot if present."""
        pass


class InMemorySnapshotStore(SnapshotStore):
    """Dictionary-backed snapshots, mainly for tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.snapshots: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.snapshots.get(key)

    def save(self, key: str, payload: str):
        self.snapshots[key] = payload

    def delete(self, key: str):
        self.snapshots.pop(key, None)


class SQLiteSnapshotStore(SnapshotStore):
    """SQLite-based snapshot store (one row per snapshot name)."""

    def __init__(self, db_path: str = "data/fieldops.db"):
        """
        Initialize SQLite snapshot store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _create_schema(self):
        conn = self._get_connection()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS snapshots (
                    name TEXT PRIMARY KEY,
                    payload TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def _init_db(self):
        """
        Initialize database schema.

        An unreadable database file is moved aside to ``<name>.corrupt``
        and a fresh, empty one is created in its place.
        """
        try:
            self._create_schema()
        except sqlite3.DatabaseError as e:
            corrupt_path = self.db_path.with_name(self.db_path.name + ".corrupt")
            logger.warning(
                f"Snapshot database {self.db_path} is unreadable ({e}); "
                f"moving it to {corrupt_path} and starting empty"
            )
            self.db_path.replace(corrupt_path)
            self._create_schema()
        logger.info(f"Snapshot database initialized at {self.db_path}")

    def load(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute(
            "SELECT payload FROM snapshots WHERE name = ?",
            (key,)
        )
        row = cursor.fetchone()
        conn.close()

        return row["payload"] if row else None

    def save(self, key: str, payload: str):
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute(
            """
            INSERT OR REPLACE INTO snapshots (name, payload, updated_at)
            VALUES (?, ?, ?)
            """,
            (key, payload, datetime.now().isoformat())
        )

        conn.commit()
        conn.close()

    def delete(self, key: str):
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM snapshots WHERE name = ?", (key,))
        conn.commit()
        conn.close()

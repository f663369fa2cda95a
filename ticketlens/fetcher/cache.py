"""SQLite cache for fetched threads and labels."""

import json
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Generator, Optional

from ticketlens.models import Conversation, Label


def get_cache_path() -> Path:
    """Get the path for the SQLite cache database."""
    cache_dir = Path(os.getenv("CACHE_DIR", "./data"))
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir / "ticketlens_cache.db"


class ThreadCache:
    """
    SQLite-based cache of raw Gmail thread payloads.

    Every fetch replaces the cached threads wholesale; the cache only saves
    a round trip to the API between `fetch` and `report`.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize the thread cache.

        Args:
            db_path: Path to the SQLite database. Uses default if not provided.
        """
        self.db_path = db_path or get_cache_path()
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS threads (
                    thread_id TEXT PRIMARY KEY,
                    position INTEGER,
                    payload TEXT,
                    fetched_at TEXT
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS labels (
                    label_id TEXT PRIMARY KEY,
                    name TEXT,
                    type TEXT,
                    fetched_at TEXT
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS cache_metadata (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with context management."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def cache_threads(self, threads: list[dict[str, Any]]) -> int:
        """
        Replace cached threads with raw `threads.get` payloads.

        Returns:
            Number of threads cached.
        """
        fetched_at = datetime.utcnow().isoformat()

        with self._get_connection() as conn:
            conn.execute("DELETE FROM threads")
            for position, thread in enumerate(threads):
                conn.execute(
                    """
                    INSERT OR REPLACE INTO threads
                    (thread_id, position, payload, fetched_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (thread.get("id"), position, json.dumps(thread), fetched_at),
                )

            conn.execute(
                """
                INSERT OR REPLACE INTO cache_metadata (key, value)
                VALUES ('last_fetch', ?)
                """,
                (fetched_at,),
            )

            conn.commit()

        return len(threads)

    def get_cached_threads(self) -> list[dict[str, Any]]:
        """Get raw thread payloads in fetch order."""
        with self._get_connection() as conn:
            cursor = conn.execute("SELECT payload FROM threads ORDER BY position")
            return [json.loads(row["payload"]) for row in cursor]

    def get_conversations(self) -> list[Conversation]:
        """Get cached threads parsed into Conversations."""
        return [Conversation.from_api(t) for t in self.get_cached_threads()]

    def cache_labels(self, labels: list[Label]) -> int:
        """
        Replace the cached label catalog.

        Returns:
            Number of labels cached.
        """
        fetched_at = datetime.utcnow().isoformat()

        with self._get_connection() as conn:
            conn.execute("DELETE FROM labels")
            for label in labels:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO labels (label_id, name, type, fetched_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (label.id, label.name, label.type, fetched_at),
                )
            conn.commit()

        return len(labels)

    def get_cached_labels(self) -> list[Label]:
        """Get the cached label catalog."""
        with self._get_connection() as conn:
            cursor = conn.execute("SELECT label_id, name, type FROM labels ORDER BY name")
            return [
                Label(id=row["label_id"], name=row["name"], type=row["type"])
                for row in cursor
            ]

    def is_fresh(self, max_age_hours: int = 1) -> bool:
        """
        Check if the last fetch is recent enough.

        Args:
            max_age_hours: Maximum age in hours for cache to be considered fresh.
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT value FROM cache_metadata WHERE key = 'last_fetch'"
            )
            row = cursor.fetchone()

            if not row:
                return False

            try:
                last_fetch = datetime.fromisoformat(row["value"])
                return datetime.utcnow() - last_fetch < timedelta(hours=max_age_hours)
            except (ValueError, TypeError):
                return False

    def get_thread_count(self) -> int:
        """Get the number of cached threads."""
        with self._get_connection() as conn:
            row = conn.execute("SELECT COUNT(*) as count FROM threads").fetchone()
            return row["count"] if row else 0

    def clear(self) -> None:
        """Clear all cached data."""
        with self._get_connection() as conn:
            conn.execute("DELETE FROM threads")
            conn.execute("DELETE FROM labels")
            conn.execute("DELETE FROM cache_metadata")
            conn.commit()

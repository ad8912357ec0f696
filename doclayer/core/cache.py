"""DocumentCache — SQLite-backed key/value side-channel for documents.

Keys follow ``"<collection>.<identity>"``.  Values are serialized with
``bson.json_util`` so ObjectIds and datetimes survive the round trip.
TTL expiry is lazy — checked on ``get()``, bulk-cleaned via
``cleanup_expired()``.
"""

from __future__ import annotations

import sqlite3
import time
from datetime import timezone
from pathlib import Path
from typing import Any

from bson import json_util

JSON_OPTIONS = json_util.RELAXED_JSON_OPTIONS.with_options(tz_aware=True, tzinfo=timezone.utc)


def cache_key(collection: str, identity: Any) -> str:
    return f"{collection}.{identity}"


class DocumentCache:
    """SQLite-backed document cache.

    Args:
        cache_dir: Directory for ``cache.db``. Created if absent.
        ttl: Time-to-live in seconds. 0 = no expiry.
    """

    def __init__(self, cache_dir: str = ".doclayer", ttl: int = 3600) -> None:
        self._cache_dir = Path(cache_dir)
        self._ttl = ttl
        self._conn: sqlite3.Connection | None = None

    def _ensure_connection(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn

        self._cache_dir.mkdir(parents=True, exist_ok=True)
        db_path = self._cache_dir / "cache.db"

        self._conn = sqlite3.connect(str(db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")

        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS documents (
                key        TEXT PRIMARY KEY,
                collection TEXT NOT NULL,
                value      TEXT NOT NULL,
                created_at REAL NOT NULL,
                expires_at REAL
            )
        """)
        self._conn.execute("CREATE INDEX IF NOT EXISTS idx_collection ON documents(collection)")
        self._conn.execute("CREATE INDEX IF NOT EXISTS idx_expires ON documents(expires_at)")
        self._conn.commit()
        return self._conn

    def get(self, key: str) -> dict | None:
        """Look up a cached document by key. Returns None on miss or expiry."""
        conn = self._ensure_connection()
        row = conn.execute("SELECT value, expires_at FROM documents WHERE key = ?", (key,)).fetchone()

        if row is None:
            return None

        value_json, expires_at = row
        if expires_at is not None and time.time() > expires_at:
            conn.execute("DELETE FROM documents WHERE key = ?", (key,))
            conn.commit()
            return None

        return json_util.loads(value_json, json_options=JSON_OPTIONS)

    def set(self, key: str, value: dict) -> None:
        """Store a document under *key*."""
        conn = self._ensure_connection()
        now = time.time()
        expires_at = (now + self._ttl) if self._ttl > 0 else None
        collection = key.split(".", 1)[0]

        conn.execute(
            "INSERT OR REPLACE INTO documents (key, collection, value, created_at, expires_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (key, collection, json_util.dumps(value, json_options=JSON_OPTIONS), now, expires_at),
        )
        conn.commit()

    def delete(self, key: str) -> int:
        """Drop one entry. Returns count deleted."""
        conn = self._ensure_connection()
        cursor = conn.execute("DELETE FROM documents WHERE key = ?", (key,))
        conn.commit()
        return cursor.rowcount

    def delete_collection(self, collection: str) -> int:
        """Delete all entries for a collection. Returns count deleted."""
        conn = self._ensure_connection()
        cursor = conn.execute("DELETE FROM documents WHERE collection = ?", (collection,))
        conn.commit()
        return cursor.rowcount

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count deleted."""
        conn = self._ensure_connection()
        cursor = conn.execute(
            "DELETE FROM documents WHERE expires_at IS NOT NULL AND expires_at < ?",
            (time.time(),),
        )
        conn.commit()
        return cursor.rowcount

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

from __future__ import annotations

import logging
import os
import sqlite3
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from .errors import StorageUnavailable

logger = logging.getLogger(__name__)

LOCATION_KEY = "playerLocation"
COINS_KEY = "playerCoins"
MEMENTOS_KEY = "cacheMementos"


def _ensure_db_dir(db_path: str) -> None:
    """Ensures the directory for the SQLite DB exists before connecting."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _resolve_db_path(db_path: str) -> str:
    """Resolves a potentially unwritable DB path to a writable one, creating the directory if needed."""
    try:
        _ensure_db_dir(db_path)
        return db_path
    except PermissionError:
        logger.warning("DB directory for %s is not writable; trying fallbacks", db_path)
    candidates = [
        os.getenv('GEOCOIN_DB_DIR'),
        os.path.join(os.getcwd(), 'data'),
        '/tmp',
    ]
    base = os.path.basename(db_path) or 'geocoin.db'
    for d in candidates:
        if not d:
            continue
        try:
            os.makedirs(d, exist_ok=True)
            return os.path.join(d, base)
        except OSError:
            continue
    return base


class MemoryStore:
    """Dict-backed store; state lives only as long as the process."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def put_many(self, items: Mapping[str, str]) -> None:
        self.data.update(items)

    def clear(self) -> None:
        self.data.clear()


class SqliteStore:
    """String key-value store in a single SQLite table. Every call opens its own connection."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._resolved: Optional[str] = None

    def _connect(self) -> sqlite3.Connection:
        try:
            if self._resolved is None:
                self._resolved = _resolve_db_path(self.db_path)
                _ensure_db_dir(self._resolved)
            conn = sqlite3.connect(self._resolved)
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailable(f"cannot open store {self.db_path}: {e}") from e
        try:
            _ensure_db(conn)
            return conn
        except sqlite3.Error as e:
            conn.close()
            raise StorageUnavailable(f"cannot open store {self.db_path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return None if row is None else str(row[0])
        except sqlite3.Error as e:
            raise StorageUnavailable(f"read of {key!r} failed: {e}") from e
        finally:
            conn.close()

    def put_many(self, items: Mapping[str, str]) -> None:
        conn = self._connect()
        try:
            now = datetime.now(timezone.utc).isoformat(timespec='seconds').replace('+00:00', 'Z')
            conn.executemany(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
                [(k, v, now) for k, v in items.items()],
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageUnavailable(f"write failed: {e}") from e
        finally:
            conn.close()

    def clear(self) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM kv")
            conn.commit()
        except sqlite3.Error as e:
            raise StorageUnavailable(f"clear failed: {e}") from e
        finally:
            conn.close()

    def keys(self) -> list:
        conn = self._connect()
        try:
            return [r[0] for r in conn.execute("SELECT key FROM kv ORDER BY key")]
        except sqlite3.Error as e:
            raise StorageUnavailable(f"listing keys failed: {e}") from e
        finally:
            conn.close()


def _ensure_db(conn: sqlite3.Connection) -> None:
    """Ensures the key-value table exists."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.commit()

"""
Key-value adapters for the entity store.
Provides a flat string-keyed durable map over SQLite, with the S3 variant in s3_adapter.py.
"""

import sqlite3
import logging
from typing import Callable, List, Optional

from .errors import StorageUnavailable

logger = logging.getLogger(__name__)

UpdateFn = Callable[[Optional[str]], Optional[str]]


class KVAdapter:
    """Base class for key-value backends (to be extended by specific implementations)"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def update(self, key: str, fn: UpdateFn) -> Optional[str]:
        """
        Read-modify-write a single key.

        `fn` receives the current value (or None) and returns the new value.
        Returning None deletes the key. Returns the value that was written.
        """
        raise NotImplementedError

    def keys(self, prefix: str = "") -> List[str]:
        raise NotImplementedError

    def ping(self) -> bool:
        raise NotImplementedError


class SQLiteKVAdapter(KVAdapter):
    """Key-value adapter backed by a single SQLite table"""

    def __init__(self, db_path: str = "telefile.db", timeout: float = 10.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection in autocommit mode so transactions are explicit"""
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def init_table(self) -> None:
        """Create the key-value table if it does not exist"""
        conn = None
        try:
            conn = self._get_connection()
            conn.execute('''
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            logger.info(f"Key-value table initialized in database: {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Error initializing key-value table: {e}")
            raise StorageUnavailable("init", self.db_path, str(e)) from e
        finally:
            if conn:
                conn.close()

    def get(self, key: str) -> Optional[str]:
        conn = None
        try:
            conn = self._get_connection()
            row = conn.execute('SELECT value FROM kv_store WHERE key = ?', (key,)).fetchone()
            return row['value'] if row else None
        except sqlite3.Error as e:
            logger.error(f"Error reading key {key}: {e}")
            raise StorageUnavailable("get", key, str(e)) from e
        finally:
            if conn:
                conn.close()

    def put(self, key: str, value: str) -> None:
        conn = None
        try:
            conn = self._get_connection()
            self._upsert(conn, key, value)
        except sqlite3.Error as e:
            logger.error(f"Error writing key {key}: {e}")
            raise StorageUnavailable("put", key, str(e)) from e
        finally:
            if conn:
                conn.close()

    def delete(self, key: str) -> bool:
        conn = None
        try:
            conn = self._get_connection()
            cursor = conn.execute('DELETE FROM kv_store WHERE key = ?', (key,))
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"Error deleting key {key}: {e}")
            raise StorageUnavailable("delete", key, str(e)) from e
        finally:
            if conn:
                conn.close()

    def update(self, key: str, fn: UpdateFn) -> Optional[str]:
        conn = None
        try:
            conn = self._get_connection()
            # IMMEDIATE takes the write lock before the read, so concurrent
            # updates of the same key serialize instead of losing writes
            conn.execute('BEGIN IMMEDIATE')
            try:
                row = conn.execute('SELECT value FROM kv_store WHERE key = ?', (key,)).fetchone()
                new_value = fn(row['value'] if row else None)
                if new_value is None:
                    conn.execute('DELETE FROM kv_store WHERE key = ?', (key,))
                else:
                    self._upsert(conn, key, new_value)
                conn.execute('COMMIT')
            except BaseException:
                conn.execute('ROLLBACK')
                raise
            return new_value
        except sqlite3.Error as e:
            logger.error(f"Error updating key {key}: {e}")
            raise StorageUnavailable("update", key, str(e)) from e
        finally:
            if conn:
                conn.close()

    def keys(self, prefix: str = "") -> List[str]:
        conn = None
        try:
            conn = self._get_connection()
            rows = conn.execute(
                "SELECT key FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
            return [row['key'] for row in rows]
        except sqlite3.Error as e:
            logger.error(f"Error listing keys with prefix {prefix}: {e}")
            raise StorageUnavailable("keys", prefix, str(e)) from e
        finally:
            if conn:
                conn.close()

    def ping(self) -> bool:
        conn = None
        try:
            conn = self._get_connection()
            conn.execute('SELECT 1 FROM kv_store LIMIT 1')
            return True
        except sqlite3.Error as e:
            raise StorageUnavailable("ping", self.db_path, str(e)) from e
        finally:
            if conn:
                conn.close()

    @staticmethod
    def _upsert(conn: sqlite3.Connection, key: str, value: str) -> None:
        conn.execute('''
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
        ''', (key, value))

# =============================================================================
# dashh_core/offline/local_database.py
# Local SQLite Key/Value Store for Offline Operations
# =============================================================================
"""
LocalDatabase - device-scoped string key/value storage backed by SQLite.

Features:
- Fixed namespace prefix on every key (e.g. "dashh_files_<owner>")
- JSON values
- Optional byte quota per value, like a browser storage quota
- Thread-local connections (Streamlit runs sessions on worker threads)

Every public read/write degrades to None/False instead of raising; failures
are logged.
"""

from __future__ import annotations
import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from dashh_core.logging import get_logger

logger = get_logger(__name__)


class LocalDatabase:
    """
    Key/value table in a local SQLite file.

    Usage:
        db = LocalDatabase(Path("local_data/dashh.db"), prefix="dashh_")
        db.set_item("files_abc", [...])
        files = db.get_item("files_abc") or []
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """

    def __init__(
        self,
        db_path: Path,
        prefix: str = "dashh_",
        quota_bytes: Optional[int] = None,
    ):
        """
        Args:
            db_path: Path to SQLite database file
            prefix: Namespace prepended to every key
            quota_bytes: Reject values whose JSON is larger than this
        """
        self.db_path = Path(db_path)
        self.prefix = prefix
        self.quota_bytes = quota_bytes
        self._local = threading.local()
        self._initialized = False
        self._init_lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if getattr(self._local, "connection", None) is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._local.connection = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
            )
            self._local.connection.row_factory = sqlite3.Row
        return self._local.connection

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def initialize(self) -> None:
        """Create the key/value table."""
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return
            with self.transaction() as conn:
                conn.execute(self.SCHEMA)
            self._initialized = True
            logger.info(f"Local database initialized at: {self.db_path}")

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    # =========================================================================
    # KEY/VALUE OPERATIONS
    # =========================================================================

    def get_item(self, key: str) -> Optional[Any]:
        """Return the decoded value, or None if absent or unreadable."""
        try:
            self.initialize()
            row = self._get_connection().execute(
                "SELECT value FROM kv_store WHERE key = ?",
                [self._key(key)],
            ).fetchone()
            return json.loads(row["value"]) if row else None
        except (sqlite3.Error, OSError, ValueError) as e:
            logger.error(f"Local store get error for '{key}': {e}")
            return None

    def set_item(self, key: str, value: Any) -> bool:
        """Serialize and store a value. Returns False if it could not be saved."""
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Local store serialization error for '{key}': {e}")
            return False

        if self.quota_bytes is not None and len(encoded.encode("utf-8")) > self.quota_bytes:
            logger.error(
                f"Local store quota exceeded for '{key}' "
                f"({len(encoded)} bytes > {self.quota_bytes})"
            )
            return False

        try:
            self.initialize()
            with self.transaction() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    """,
                    [self._key(key), encoded, datetime.now().isoformat()],
                )
            return True
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Local store set error for '{key}': {e}")
            return False

    def remove_item(self, key: str) -> bool:
        try:
            self.initialize()
            with self.transaction() as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", [self._key(key)])
            return True
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Local store remove error for '{key}': {e}")
            return False

    def keys(self) -> List[str]:
        """Keys in this namespace, without the prefix."""
        try:
            self.initialize()
            rows = self._get_connection().execute(
                "SELECT key FROM kv_store WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
                [self.prefix.replace("%", r"\%").replace("_", r"\_") + "%"],
            ).fetchall()
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Local store key listing error: {e}")
            return []
        return [row["key"][len(self.prefix):] for row in rows]

    def close(self) -> None:
        """Close this thread's database connection."""
        if getattr(self._local, "connection", None) is not None:
            self._local.connection.close()
            self._local.connection = None

"""
SQLite key/value storage for persisted sheet progress and preferences.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict

from sheet_tracker.config.constants import STORAGE_KEY

logger = logging.getLogger(__name__)

# Fields of the store written to disk; `loading` is always saved as False
PERSISTED_FIELDS = ("topics", "sheet", "expanded_topics", "expanded_subtopics", "theme")


class StorageService:
    def __init__(self, db_path: Path, storage_key: str = STORAGE_KEY):
        self.db_path = Path(db_path)
        self.storage_key = storage_key
        self.ensure_configs_table()

    def ensure_configs_table(self) -> None:
        """Create the configs table if missing."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS configs (
                    key TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # ------------------------------------------------------------------
    # Raw config blobs
    # ------------------------------------------------------------------
    def load_config(self, key: str) -> Dict[str, Any]:
        with self._connect() as conn:
            cur = conn.execute("SELECT value_json FROM configs WHERE key = ?", (key,))
            row = cur.fetchone()
            if not row:
                return {}
            try:
                data = json.loads(row["value_json"])
            except json.JSONDecodeError:
                logger.warning("Ignoring corrupt config blob '%s'", key)
                return {}
        return data if isinstance(data, dict) else {}

    def save_config(self, key: str, payload: Dict[str, Any]) -> None:
        value_json = json.dumps(payload, ensure_ascii=False)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO configs(key, value_json)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value_json = excluded.value_json,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value_json),
            )

    def remove_config(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM configs WHERE key = ?", (key,))

    # ------------------------------------------------------------------
    # Persisted store state
    # ------------------------------------------------------------------
    def load_state(self) -> Dict[str, Any]:
        """Return the persisted state blob, or {} when nothing was saved."""
        return self.load_config(self.storage_key)

    def save_state(self, state: Dict[str, Any]) -> None:
        """
        Persist the store state under the storage key.

        Only PERSISTED_FIELDS are written; `loading` is forced to False so an
        in-progress load is never restored.
        """
        payload = {field: state.get(field) for field in PERSISTED_FIELDS}
        payload["loading"] = False
        self.save_config(self.storage_key, payload)

    def clear_state(self) -> None:
        self.remove_config(self.storage_key)

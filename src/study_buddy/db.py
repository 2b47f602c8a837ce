"""SQLite-backed store for the study data tree and user settings."""
import json
import logging
import os
import sqlite3
from pathlib import Path

from study_buddy.errors import StorageError, StudyBuddyError
from study_buddy.models import Data

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = os.getenv(
    "STUDY_BUDDY_DB", str(Path.home() / ".study_buddy" / "study_buddy.db")
)

DATA_KEY = "studyBuddyData"

SCHEMA = """
CREATE TABLE IF NOT EXISTS app_data (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    saved_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


class SqliteStore:
    """Key-value persistence for the whole data tree.

    ``load()`` returns ``None`` when nothing has been saved yet and raises
    ``StorageError`` when the saved document can't be decoded. ``save()``
    raises ``StorageError`` on failure.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        init_db(db_path)

    def load(self) -> Data | None:
        """Return the saved tree, None if nothing was saved yet."""
        conn = get_connection(self.db_path)
        row = conn.execute("SELECT value FROM app_data WHERE key = ?", (DATA_KEY,)).fetchone()
        conn.close()
        if row is None:
            return None
        try:
            return Data.from_dict(json.loads(row["value"]))
        except (ValueError, KeyError, TypeError, StudyBuddyError) as e:
            logger.error("Saved data could not be decoded: %s", e)
            raise StorageError(f"Saved data could not be decoded: {e}") from e

    def load_or_default(self) -> Data:
        data = self.load()
        return data if data is not None else Data()

    def save(self, data: Data) -> None:
        payload = json.dumps(data.to_dict())
        try:
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    "INSERT INTO app_data (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value, saved_at=CURRENT_TIMESTAMP",
                    (DATA_KEY, payload),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error("Failed to save data: %s", e)
            raise StorageError(f"Failed to save data: {e}") from e

    def clear(self) -> None:
        conn = get_connection(self.db_path)
        conn.execute("DELETE FROM app_data WHERE key = ?", (DATA_KEY,))
        conn.commit()
        conn.close()

"""Settings store for folder and table locations.

Values are storage URIs (``gdrive:<id>``, ``local:/path``, ``gsheet:<id>``)
kept in SQLite so they survive between runs. An environment variable
``STARSORT_<KEY>`` (key uppercased) overrides the stored value.
"""

import os
import sqlite3
from typing import Dict, Optional

from starsort.errors import ConfigurationError

DB_DIR = os.path.expanduser("~/.config/starsort")
DB_PATH = os.environ.get('STARSORT_DB', os.path.join(DB_DIR, "settings.db"))

# Logical keys
START_DATA_PIPELINE = "startDataPipeline"
TEMP_RENAMING_COMPLETE = "tempRenamingComplete"
PROCESSED_STAR_REPORTS = "processedStarReports"
DUPLICATE_REPORTS = "duplicateReports"
UNRESOLVED_REPORTS = "unresolvedReports"
PROPERTY_DIRECTORY = "propertyDirectory"
ROUTE_TABLE = "routeTable"

SETTING_KEYS = (
    START_DATA_PIPELINE,
    TEMP_RENAMING_COMPLETE,
    PROCESSED_STAR_REPORTS,
    DUPLICATE_REPORTS,
    UNRESOLVED_REPORTS,
    PROPERTY_DIRECTORY,
    ROUTE_TABLE,
)


def env_var_for(key: str) -> str:
    return f"STARSORT_{key.upper()}"


class SettingsStore:
    """SQLite key/value store for StarSort settings."""

    def __init__(self, db_path: str = DB_PATH) -> None:
        db_dir = os.path.dirname(db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir)

        self.db_path = db_path
        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        self._init_db()

    def _init_db(self) -> None:
        """Create table if it doesn't exist."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def get(self, key: str) -> Optional[str]:
        """Return the value for ``key`` (environment first), or None."""
        override = os.environ.get(env_var_for(key))
        if override:
            return override.strip()
        row = self.conn.execute(
            "SELECT value FROM settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite a value. Setting the same value twice is a no-op."""
        if key not in SETTING_KEYS:
            raise ConfigurationError(
                f"Unknown setting '{key}'. Known settings: {', '.join(SETTING_KEYS)}"
            )
        self.conn.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
            (key, value.strip()),
        )
        self.conn.commit()

    def require(self, key: str) -> str:
        """Return the value for ``key`` or raise ConfigurationError."""
        value = self.get(key)
        if not value:
            raise ConfigurationError(
                f"Setting '{key}' is not configured. "
                f"Run: main.py --set {key}=<uri>  (or set {env_var_for(key)})"
            )
        return value

    def all(self) -> Dict[str, Optional[str]]:
        return {key: self.get(key) for key in SETTING_KEYS}

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

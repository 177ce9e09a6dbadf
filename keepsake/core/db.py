"""
SQLite storage for saved content.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator

from . import config


@contextmanager
def get_db(db_path: str = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    path = db_path or config.DB_PATH
    config.ensure_db_directory(path)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: str = None):
    """Initialize the database with required tables."""
    with get_db(db_path) as conn:
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS content (
                id TEXT PRIMARY KEY,
                content_type TEXT NOT NULL,
                title TEXT NOT NULL,
                description TEXT NOT NULL,
                tags TEXT NOT NULL DEFAULT '[]',     -- JSON array, sorted
                timestamp TEXT NOT NULL,             -- ISO-8601 UTC, microsecond precision
                payload TEXT NOT NULL,               -- JSON object for the content_type variant
                embedding TEXT,                      -- JSON array of floats
                embedding_model TEXT,
                embedding_hash TEXT,
                is_favorite BOOLEAN DEFAULT FALSE,
                access_count INTEGER DEFAULT 0,
                last_accessed TEXT,
                updated_at TEXT,
                CHECK ((embedding IS NULL) = (embedding_model IS NULL))
            )
        ''')

        # Create indexes for performance
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_content_type_ts ON content(content_type, timestamp DESC)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_content_ts ON content(timestamp DESC)')

        conn.commit()


def health_check(db_path: str = None):
    """Check database health."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            table_names = [row[0] for row in cursor.fetchall()]
            return 'content' in table_names
    except sqlite3.Error:
        return False

"""
SQLite database layer for the dojo exam tracker.

Uses raw sqlite3 with WAL mode and parameterized queries. Student records
are stored as JSON payloads so the engine's field names survive unchanged.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from flask import current_app, g

DEFAULT_DATABASE = Path(__file__).parent / "dojo_exams.db"


SCHEMA = """
CREATE TABLE IF NOT EXISTS students (
    id TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    version INTEGER NOT NULL DEFAULT 0,
    active INTEGER NOT NULL DEFAULT 1,
    updated_at TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS attendance (
    id TEXT PRIMARY KEY,
    student_id TEXT NOT NULL,
    date TEXT NOT NULL,
    present INTEGER NOT NULL DEFAULT 1,
    session_type TEXT NOT NULL DEFAULT 'normal',
    attendance_value REAL,
    notes TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_attendance_student_date ON attendance(student_id, date);

CREATE TABLE IF NOT EXISTS notifications (
    id TEXT PRIMARY KEY,
    student_id TEXT NOT NULL,
    type TEXT NOT NULL,
    title TEXT NOT NULL,
    body TEXT NOT NULL,
    created_at TEXT NOT NULL,
    read INTEGER NOT NULL DEFAULT 0,
    email_sent INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_notifications_student ON notifications(student_id, created_at);
"""


def get_db() -> sqlite3.Connection:
    """Return a DB connection from Flask g, creating if needed."""
    if "db" not in g:
        db_path = current_app.config.get("DATABASE", str(DEFAULT_DATABASE))
        g.db = sqlite3.connect(db_path)
        g.db.row_factory = sqlite3.Row
        g.db.execute("PRAGMA journal_mode=WAL")
    return g.db


def close_db(e=None) -> None:
    """Teardown handler — close DB connection."""
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_db() -> None:
    """Execute schema DDL to create all tables."""
    db = get_db()
    db.executescript(SCHEMA)
    db.commit()


def init_app(app) -> None:
    """Register teardown and auto-init on first request."""
    app.teardown_appcontext(close_db)

    @app.before_request
    def _ensure_db():
        if not getattr(app, "_db_initialized", False):
            init_db()
            app._db_initialized = True

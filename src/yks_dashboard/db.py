"""Database initialization and connection management."""
import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = str(Path.home() / ".yks_dashboard" / "dashboard.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    priority TEXT NOT NULL DEFAULT 'medium',
    category TEXT NOT NULL DEFAULT 'genel',
    color TEXT DEFAULT '#8B5CF6',
    completed INTEGER NOT NULL DEFAULT 0,
    completed_at TEXT,
    due_date TEXT,
    recurrence_type TEXT NOT NULL DEFAULT 'none',
    recurrence_end_date TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS moods (
    id TEXT PRIMARY KEY,
    mood TEXT NOT NULL,
    mood_bg TEXT,
    note TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS goals (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    target_value TEXT NOT NULL,
    current_value TEXT NOT NULL DEFAULT '0',
    unit TEXT NOT NULL,
    category TEXT NOT NULL DEFAULT 'genel',
    timeframe TEXT NOT NULL DEFAULT 'aylık',
    target_date TEXT,
    completed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS question_logs (
    id TEXT PRIMARY KEY,
    exam_type TEXT NOT NULL,
    subject TEXT NOT NULL,
    topic TEXT,
    correct_count TEXT NOT NULL,
    wrong_count TEXT NOT NULL,
    blank_count TEXT NOT NULL DEFAULT '0',
    wrong_topics TEXT DEFAULT '[]',
    time_spent_minutes INTEGER,
    study_date TEXT NOT NULL,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS exam_results (
    id TEXT PRIMARY KEY,
    exam_name TEXT NOT NULL,
    exam_date TEXT NOT NULL,
    tyt_net TEXT NOT NULL DEFAULT '0',
    ayt_net TEXT NOT NULL DEFAULT '0',
    subjects_data TEXT,
    ranking TEXT,
    notes TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS exam_subject_nets (
    id TEXT PRIMARY KEY,
    exam_id TEXT NOT NULL,
    exam_type TEXT NOT NULL,
    subject TEXT NOT NULL,
    net_score TEXT NOT NULL,
    correct_count TEXT NOT NULL DEFAULT '0',
    wrong_count TEXT NOT NULL DEFAULT '0',
    blank_count TEXT NOT NULL DEFAULT '0',
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS flashcards (
    id TEXT PRIMARY KEY,
    question TEXT NOT NULL,
    answer TEXT NOT NULL,
    exam_type TEXT NOT NULL DEFAULT 'TYT',
    subject TEXT NOT NULL DEFAULT 'genel',
    topic TEXT,
    difficulty TEXT NOT NULL DEFAULT 'medium',
    last_reviewed TEXT,
    next_review TEXT,
    review_count TEXT NOT NULL DEFAULT '0',
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS flashcard_errors (
    id TEXT PRIMARY KEY,
    card_id TEXT NOT NULL,
    question TEXT NOT NULL,
    topic TEXT,
    difficulty TEXT NOT NULL,
    user_answer TEXT NOT NULL,
    correct_answer TEXT NOT NULL,
    timestamp TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
    logger.debug("Database ready at %s", db_path)


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def insert_row(conn: sqlite3.Connection, table: str, row: dict) -> None:
    columns = ", ".join(row)
    placeholders = ", ".join("?" for _ in row)
    conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", tuple(row.values()))


def update_row(conn: sqlite3.Connection, table: str, record_id: str, row: dict) -> None:
    if not row:
        return
    assignments = ", ".join(f"{column}=?" for column in row)
    conn.execute(
        f"UPDATE {table} SET {assignments} WHERE id=?",
        (*row.values(), record_id),
    )


def delete_row(conn: sqlite3.Connection, table: str, record_id: str) -> bool:
    cur = conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
    return cur.rowcount > 0

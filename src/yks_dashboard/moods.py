"""Mood and note storage. A mood with a note doubles as a note."""
import logging

from yks_dashboard.db import get_connection, insert_row, new_id, utc_now
from yks_dashboard.models import Mood, from_row, from_wire, to_row

logger = logging.getLogger(__name__)


def get_moods(db_path: str) -> list[Mood]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM moods ORDER BY created_at DESC").fetchall()
    conn.close()
    return [from_row(Mood, row) for row in rows]


def get_latest_mood(db_path: str) -> Mood | None:
    moods = get_moods(db_path)
    return moods[0] if moods else None


def create_mood(db_path: str, payload: dict) -> Mood:
    mood = from_wire(Mood, {**payload, "id": new_id(), "createdAt": utc_now()})
    conn = get_connection(db_path)
    insert_row(conn, "moods", to_row(mood))
    conn.commit()
    conn.close()
    logger.info("Created mood %s", mood.id)
    return mood

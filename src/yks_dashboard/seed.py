"""Seed the database with sample goals and flashcards."""
import json
import logging
from pathlib import Path

from yks_dashboard.db import get_connection
from yks_dashboard.flashcards import create_flashcard
from yks_dashboard.goals import create_goal
from yks_dashboard.schema import validate_insert

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether sample content has already been loaded."""
    conn = get_connection(db_path)
    goals = conn.execute("SELECT COUNT(*) FROM goals").fetchone()[0]
    cards = conn.execute("SELECT COUNT(*) FROM flashcards").fetchone()[0]
    conn.close()
    return goals > 0 or cards > 0


def _load_content(name: str, key: str) -> list[dict]:
    return json.loads((CONTENT_DIR / name).read_text(encoding="utf-8"))[key]


def seed_goals(db_path: str) -> None:
    """Insert the sample goals from goals.json."""
    for goal in _load_content("goals.json", "goals"):
        create_goal(db_path, validate_insert("goal", goal))


def seed_flashcards(db_path: str) -> None:
    """Insert the sample flashcards from flashcards.json."""
    for card in _load_content("flashcards.json", "flashcards"):
        create_flashcard(db_path, validate_insert("flashcard", card))


def seed_all(db_path: str) -> None:
    """Run all seed functions in order."""
    if is_seeded(db_path):
        return
    seed_goals(db_path)
    seed_flashcards(db_path)
    logger.info("Seeded sample goals and flashcards")

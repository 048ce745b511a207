"""Flashcard storage and interval scheduling."""
import logging
from datetime import datetime, timedelta, timezone

from yks_dashboard.db import (
    delete_row, get_connection, insert_row, new_id, update_row, utc_now,
)
from yks_dashboard.errors import NotFoundError
from yks_dashboard.models import (
    Difficulty, Flashcard, FlashcardError, apply_updates, from_row, from_wire, to_row,
)

logger = logging.getLogger(__name__)


def review_interval(difficulty: Difficulty, review_count: int) -> int:
    """Days until the next review after the review_count-th review."""
    if difficulty == Difficulty.EASY:
        return max(1, review_count * 3)
    if difficulty == Difficulty.MEDIUM:
        return max(1, review_count * 2)
    return 1


def _load(conn, card_id: str) -> Flashcard:
    row = conn.execute("SELECT * FROM flashcards WHERE id = ?", (card_id,)).fetchone()
    if row is None:
        raise NotFoundError(f"Flashcard {card_id} not found")
    return from_row(Flashcard, row)


def get_flashcards(db_path: str) -> list[Flashcard]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM flashcards ORDER BY created_at DESC").fetchall()
    conn.close()
    return [from_row(Flashcard, row) for row in rows]


def get_flashcard(db_path: str, card_id: str) -> Flashcard:
    conn = get_connection(db_path)
    try:
        return _load(conn, card_id)
    finally:
        conn.close()


def get_flashcards_due(db_path: str, now: datetime | None = None) -> list[Flashcard]:
    """Cards whose next review is due; never-reviewed cards first, then oldest due."""
    now_iso = (now or datetime.now(timezone.utc)).isoformat()
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT * FROM flashcards
        WHERE next_review IS NULL OR next_review <= ?
        ORDER BY last_reviewed IS NOT NULL, next_review ASC NULLS FIRST""",
        (now_iso,),
    ).fetchall()
    conn.close()
    return [from_row(Flashcard, row) for row in rows]


def create_flashcard(db_path: str, payload: dict) -> Flashcard:
    created_at = utc_now()
    card = from_wire(Flashcard, {
        "nextReview": created_at,
        **{k: v for k, v in payload.items() if v is not None},
        "id": new_id(),
        "reviewCount": "0",
        "createdAt": created_at,
    })
    conn = get_connection(db_path)
    insert_row(conn, "flashcards", to_row(card))
    conn.commit()
    conn.close()
    logger.info("Created flashcard %s", card.id)
    return card


def update_flashcard(db_path: str, card_id: str, updates: dict) -> Flashcard:
    conn = get_connection(db_path)
    try:
        updated, changed = apply_updates(_load(conn, card_id), updates)
        update_row(conn, "flashcards", card_id, {k: v for k, v in to_row(updated).items() if k in changed})
        conn.commit()
        return updated
    finally:
        conn.close()


def delete_flashcard(db_path: str, card_id: str) -> bool:
    conn = get_connection(db_path)
    deleted = delete_row(conn, "flashcards", card_id)
    conn.commit()
    conn.close()
    return deleted


def review_flashcard(
    db_path: str,
    card_id: str,
    difficulty: Difficulty,
    is_correct: bool = True,
    user_answer: str = "",
    now: datetime | None = None,
) -> Flashcard:
    """Record a review and schedule the next one.

    An incorrect answer is also stored as a flashcard error for later analysis.
    """
    now = now or datetime.now(timezone.utc)
    difficulty = Difficulty(difficulty)
    conn = get_connection(db_path)
    try:
        card = _load(conn, card_id)
        count = int(card.review_count or 0) + 1
        next_review = now + timedelta(days=review_interval(difficulty, count))
        conn.execute(
            """UPDATE flashcards SET difficulty=?, last_reviewed=?, next_review=?, review_count=?
            WHERE id=?""",
            (difficulty.value, now.isoformat(), next_review.isoformat(), str(count), card_id),
        )
        if not is_correct:
            error = FlashcardError(
                id=new_id(),
                card_id=card_id,
                question=card.question,
                topic=card.topic,
                difficulty=difficulty,
                user_answer=user_answer or "",
                correct_answer=card.answer,
                timestamp=now.isoformat(),
            )
            insert_row(conn, "flashcard_errors", to_row(error))
            logger.info("Recorded wrong answer for flashcard %s", card_id)
        conn.commit()
    finally:
        conn.close()
    return get_flashcard(db_path, card_id)


def get_flashcard_errors(db_path: str) -> list[FlashcardError]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM flashcard_errors ORDER BY timestamp").fetchall()
    conn.close()
    return [from_row(FlashcardError, row) for row in rows]


def get_flashcard_errors_by_difficulty(db_path: str) -> dict[str, list[FlashcardError]]:
    grouped = {d.value: [] for d in Difficulty}
    for error in get_flashcard_errors(db_path):
        grouped[error.difficulty.value].append(error)
    return grouped

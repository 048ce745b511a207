# tests/test_flashcards.py
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from yks_dashboard.db import get_connection, init_db
from yks_dashboard.errors import NotFoundError
from yks_dashboard.flashcards import (
    create_flashcard, delete_flashcard, get_flashcard, get_flashcard_errors,
    get_flashcard_errors_by_difficulty, get_flashcards, get_flashcards_due, review_flashcard,
    review_interval, update_flashcard,
)
from yks_dashboard.models import Difficulty

CREATED = "2024-05-01T08:00:00+00:00"
REVIEWED = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def _card(db_path, question="Q", answer="A", **extra):
    with patch("yks_dashboard.flashcards.utc_now", return_value=CREATED):
        return create_flashcard(db_path, {"question": question, "answer": answer, **extra})


@pytest.mark.parametrize("difficulty,count,days", [
    (Difficulty.EASY, 1, 3),
    (Difficulty.EASY, 4, 12),
    (Difficulty.MEDIUM, 1, 2),
    (Difficulty.MEDIUM, 3, 6),
    (Difficulty.HARD, 1, 1),
    (Difficulty.HARD, 10, 1),
    (Difficulty.EASY, 0, 1),
])
def test_review_interval(difficulty, count, days):
    assert review_interval(difficulty, count) == days


def test_new_card_is_due_immediately(tmp_db):
    init_db(tmp_db)
    card = _card(tmp_db)
    assert card.next_review == CREATED
    assert card.review_count == "0"
    assert [c.id for c in get_flashcards_due(tmp_db, now=REVIEWED)] == [card.id]


def test_create_ignores_supplied_review_count(tmp_db):
    init_db(tmp_db)
    card = _card(tmp_db, reviewCount="7", nextReview="2030-01-01T00:00:00+00:00")
    assert card.review_count == "0"
    assert card.next_review == "2030-01-01T00:00:00+00:00"


def test_review_schedules_next_review(tmp_db):
    init_db(tmp_db)
    card = _card(tmp_db)
    reviewed = review_flashcard(tmp_db, card.id, "easy", now=REVIEWED)
    assert reviewed.review_count == "1"
    assert reviewed.difficulty is Difficulty.EASY
    assert reviewed.last_reviewed == REVIEWED.isoformat()
    assert reviewed.next_review == "2024-05-04T09:00:00+00:00"

    again = review_flashcard(tmp_db, card.id, Difficulty.MEDIUM, now=REVIEWED)
    assert again.review_count == "2"
    assert again.next_review == "2024-05-05T09:00:00+00:00"


def test_due_cards_never_reviewed_first_then_oldest_due(tmp_db):
    init_db(tmp_db)
    easy = _card(tmp_db, "easy")
    hard = _card(tmp_db, "hard")
    fresh = _card(tmp_db, "fresh")
    review_flashcard(tmp_db, easy.id, "easy", now=REVIEWED)  # due 05-04
    review_flashcard(tmp_db, hard.id, "hard", now=REVIEWED)  # due 05-02

    early = datetime(2024, 5, 3, tzinfo=timezone.utc)
    assert [c.id for c in get_flashcards_due(tmp_db, now=early)] == [fresh.id, hard.id]

    late = datetime(2024, 5, 10, tzinfo=timezone.utc)
    assert [c.id for c in get_flashcards_due(tmp_db, now=late)] == [fresh.id, hard.id, easy.id]


def test_wrong_answer_is_recorded_as_error(tmp_db):
    init_db(tmp_db)
    card = _card(tmp_db, "Suyun formülü?", "H2O", topic="Periyodik Tablo")
    review_flashcard(tmp_db, card.id, "hard", is_correct=False, user_answer="CO2", now=REVIEWED)
    review_flashcard(tmp_db, card.id, "easy", is_correct=True, now=REVIEWED)

    errors = get_flashcard_errors(tmp_db)
    assert len(errors) == 1
    error = errors[0]
    assert error.card_id == card.id
    assert error.user_answer == "CO2"
    assert error.correct_answer == "H2O"
    assert error.topic == "Periyodik Tablo"
    assert error.timestamp == REVIEWED.isoformat()

    grouped = get_flashcard_errors_by_difficulty(tmp_db)
    assert set(grouped) == {"easy", "medium", "hard"}
    assert [e.id for e in grouped["hard"]] == [error.id]
    assert grouped["easy"] == []


def test_review_missing_card(tmp_db):
    init_db(tmp_db)
    with pytest.raises(NotFoundError):
        review_flashcard(tmp_db, "missing", "easy")


def test_update_and_delete_flashcard(tmp_db):
    init_db(tmp_db)
    card = _card(tmp_db)
    assert update_flashcard(tmp_db, card.id, {"answer": "B"}).answer == "B"
    assert get_flashcard(tmp_db, card.id).answer == "B"
    assert delete_flashcard(tmp_db, card.id) is True
    assert get_flashcards(tmp_db) == []
    conn = get_connection(tmp_db)
    assert conn.execute("SELECT COUNT(*) FROM flashcards").fetchone()[0] == 0
    conn.close()

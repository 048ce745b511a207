"""Tests for insert validation."""
import pytest

from yks_dashboard.errors import ValidationError
from yks_dashboard.schema import validate_insert, validate_review, validate_update


def test_task_insert_applies_defaults():
    payload = validate_insert("task", {"title": "Paragraf çöz"})
    assert payload["priority"] == "medium"
    assert payload["category"] == "genel"
    assert payload["color"] == "#8B5CF6"
    assert payload["completed"] is False
    assert payload["recurrenceType"] == "none"
    assert payload["dueDate"] is None


def test_task_insert_strips_system_and_unknown_fields():
    payload = validate_insert("task", {
        "title": "x", "id": "abc", "createdAt": "2024-01-01", "completedAt": "2024-01-01",
        "unexpected": 1,
    })
    for key in ("id", "createdAt", "completedAt", "unexpected"):
        assert key not in payload


def test_missing_required_field():
    with pytest.raises(ValidationError) as exc:
        validate_insert("task", {"priority": "high"})
    assert any(e.startswith("title") for e in exc.value.errors)


def test_blank_title_rejected():
    with pytest.raises(ValidationError):
        validate_insert("task", {"title": "   "})


def test_enum_outside_closed_set():
    with pytest.raises(ValidationError) as exc:
        validate_insert("task", {"title": "x", "priority": "urgent"})
    assert any(e.startswith("priority") for e in exc.value.errors)


def test_wrong_primitive_type():
    with pytest.raises(ValidationError):
        validate_insert("task", {"title": "x", "completed": "yes"})
    with pytest.raises(ValidationError):
        validate_insert("question_log", {
            "exam_type": "TYT", "subject": "Matematik", "correct_count": 5,
            "wrong_count": "1", "study_date": "2024-05-01",
        })


def test_question_log_insert():
    payload = validate_insert("question_log", {
        "exam_type": "AYT", "subject": "Fizik", "correct_count": "10", "wrong_count": "2",
        "study_date": "2024-05-01", "wrong_topics": ["Optik"], "time_spent_minutes": 40,
    })
    assert payload["blank_count"] == "0"
    assert payload["wrong_topics"] == ["Optik"]
    assert payload["time_spent_minutes"] == 40


def test_question_log_negative_minutes_rejected():
    with pytest.raises(ValidationError):
        validate_insert("question_log", {
            "exam_type": "TYT", "subject": "Kimya", "correct_count": "1", "wrong_count": "0",
            "study_date": "2024-05-01", "time_spent_minutes": -5,
        })


def test_bad_date_rejected():
    with pytest.raises(ValidationError):
        validate_insert("exam_result", {"exam_name": "Deneme 1", "exam_date": "yesterday"})


@pytest.mark.parametrize("bad", ["2024-99-99", "2024-02-30", "2024-05-01garbage", "2024-05-01T25:00:00"])
def test_impossible_or_trailing_dates_rejected(bad):
    log = {"exam_type": "TYT", "subject": "Matematik", "correct_count": "1", "wrong_count": "0"}
    with pytest.raises(ValidationError) as exc:
        validate_insert("question_log", {**log, "study_date": bad})
    assert any(e.startswith("study_date") for e in exc.value.errors)
    with pytest.raises(ValidationError):
        validate_insert("task", {"title": "x", "dueDate": bad})
    with pytest.raises(ValidationError):
        validate_insert("goal", {"title": "x", "targetValue": "1", "unit": "net", "targetDate": bad})


def test_date_with_time_part_accepted():
    payload = validate_insert("task", {"title": "x", "dueDate": "2024-05-12T12:00:00.000Z",
                                       "recurrenceEndDate": "2024-06-30"})
    assert payload["dueDate"] == "2024-05-12T12:00:00.000Z"
    assert payload["recurrenceEndDate"] == "2024-06-30"


def test_flashcard_strips_review_count():
    payload = validate_insert("flashcard", {"question": "Q", "answer": "A", "reviewCount": "9"})
    assert "reviewCount" not in payload
    assert payload["examType"] == "TYT"
    assert payload["subject"] == "genel"


def test_goal_timeframe_must_be_known():
    with pytest.raises(ValidationError):
        validate_insert("goal", {"title": "x", "targetValue": "1", "unit": "net", "timeframe": "daily"})


def test_payload_must_be_object():
    with pytest.raises(ValidationError):
        validate_insert("mood", ["not", "a", "dict"])


def test_unknown_entity():
    with pytest.raises(ValueError):
        validate_insert("weather", {})


def test_validate_update_returns_only_updated_fields():
    existing = validate_insert("task", {"title": "Old"})
    assert validate_update("task", existing, {"title": "New", "id": "zzz"}) == {"title": "New"}


def test_validate_update_checks_merged_record():
    existing = validate_insert("task", {"title": "Old"})
    with pytest.raises(ValidationError):
        validate_update("task", existing, {"priority": "urgent"})


def test_validate_review():
    review = validate_review({"difficulty": "easy"})
    assert review == {"difficulty": "easy", "isCorrect": True, "userAnswer": None}
    with pytest.raises(ValidationError):
        validate_review({"difficulty": "trivial"})

# tests/test_integration.py
"""End-to-end tests: remote store talking to the Flask API over a test client."""
from datetime import date

import pytest

from yks_dashboard.dashboard import (
    format_local_date, latest_notes, task_list_from_calendar, weekly_activity_summary,
)
from yks_dashboard.errors import ServerError, ValidationError
from yks_dashboard.models import ExamResult, Mood, QuestionLog, Task


def test_toggle_refreshes_todays_tasks(store, session):
    today = format_local_date(date.today())
    store.mutate("create_task", {"title": "Paragraf", "dueDate": today})
    store.mutate("create_task", {"title": "Deneme", "dueDate": today, "priority": "high"})

    calendar_key = f"calendar/{today}"
    before = task_list_from_calendar(store.fetch(calendar_key))
    assert (before.completed_count, before.total_count) == (0, 2)
    assert before.tasks[0].title == "Deneme"  # high priority first

    reads = len(session.calls)
    store.fetch(calendar_key)
    assert len(session.calls) == reads  # served from cache

    store.mutate("toggle_task", id=before.tasks[1].id)
    after = task_list_from_calendar(store.fetch(calendar_key))
    assert (after.completed_count, after.total_count) == (1, 2)


def test_note_shows_up_in_latest_notes(store):
    assert store.fetch("moods/latest") is None
    assert store.fetch("moods") == []
    store.mutate("create_mood", {"mood": "😊", "note": "Türev bitti"})
    store.mutate("create_mood", {"mood": "😐"})

    assert store.fetch("moods/latest")["mood"] == "😐"
    notes = latest_notes(store.fetch_records("moods", Mood))
    assert [m.note for m in notes] == ["Türev bitti"]


def test_weekly_activity_from_server_records(store):
    today = date.today()
    day = format_local_date(today)
    store.mutate("create_question_log", {
        "exam_type": "TYT", "subject": "Matematik", "correct_count": "3",
        "wrong_count": "2", "blank_count": "0", "study_date": day,
    })
    task = store.mutate("create_task", {"title": "Limit"})
    store.mutate("toggle_task", id=task["id"])
    store.mutate("create_exam_result", {"exam_name": "Deneme 1", "exam_date": day})

    weekly = weekly_activity_summary(
        store.fetch_records("question-logs", QuestionLog),
        store.fetch_records("tasks", Task),
        store.fetch_records("exam-results", ExamResult),
        today,
    )
    values = [m.value for m in weekly.metrics]
    assert values[0] == 5
    assert values[2] == 1
    assert values[3] == 1
    # completedAt is a UTC timestamp; near midnight it may fall on another local day
    assert values[1] in (0, 1)
    assert weekly.total_activity == sum(values)


def test_logging_questions_refreshes_topic_stats(store):
    assert store.fetch("topics/priority") == []
    for _ in range(2):
        store.mutate("create_question_log", {
            "exam_type": "AYT", "subject": "Fizik", "correct_count": "5", "wrong_count": "1",
            "study_date": "2024-05-01", "wrong_topics": ["Optik"],
        })
    topics = store.fetch("topics/priority")
    assert [t["topic"] for t in topics] == ["Optik"]
    assert store.fetch("subjects/stats")[0]["total_questions"] == 12

    store.mutate("clear_question_logs")
    assert store.fetch("topics/priority") == []


def test_exam_delete_cascades_through_store(store):
    exam = store.mutate("create_exam_result", {"exam_name": "Deneme 2", "exam_date": "2024-05-01"})
    store.mutate("create_exam_subject_net", {
        "exam_id": exam["id"], "exam_type": "TYT", "subject": "Türkçe", "net_score": "30",
    })
    assert len(store.fetch("exam-subject-nets")) == 1
    store.mutate("delete_exam_result", id=exam["id"])
    assert store.fetch("exam-subject-nets") == []
    assert store.fetch("exam-results") == []


def test_flashcard_review_through_store(store):
    card = store.mutate("create_flashcard", {"question": "H2O nedir?", "answer": "su"})
    assert [c["id"] for c in store.fetch("flashcards/due")] == [card["id"]]
    store.mutate("review_flashcard", {"difficulty": "medium", "isCorrect": False, "userAnswer": "tuz"},
                 id=card["id"])
    assert store.fetch("flashcards/due") == []
    errors = store.fetch("flashcards/errors")
    assert errors[0]["userAnswer"] == "tuz"


def test_errors_surface_to_caller(store, session):
    with pytest.raises(ValidationError):
        store.mutate("create_goal", {"title": "Net"})
    assert session.calls == []
    with pytest.raises(ServerError) as exc:
        store.mutate("toggle_task", id="missing")
    assert exc.value.status == 404

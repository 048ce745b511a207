"""Tests for mood, goal, question log and exam storage."""
from unittest.mock import patch

import pytest

from yks_dashboard.db import init_db
from yks_dashboard.errors import NotFoundError
from yks_dashboard.exams import (
    create_exam_result, create_exam_subject_net, delete_all_exam_results, delete_exam_result,
    delete_exam_subject_net, delete_exam_subject_nets_by_exam_id, get_exam_result,
    get_exam_results, get_exam_subject_net, get_exam_subject_nets,
    get_exam_subject_nets_by_exam_id, update_exam_subject_net,
)
from yks_dashboard.goals import create_goal, delete_goal, get_goal, get_goals, update_goal
from yks_dashboard.models import ExamType, Timeframe
from yks_dashboard.moods import create_mood, get_latest_mood, get_moods
from yks_dashboard.question_logs import (
    create_question_log, delete_all_question_logs, delete_question_log, get_question_log,
    get_question_logs, get_question_logs_by_date_range, update_question_log,
)


def _log(**overrides):
    payload = {
        "exam_type": "TYT", "subject": "Matematik", "topic": "Problemler",
        "correct_count": "10", "wrong_count": "2", "blank_count": "1",
        "wrong_topics": ["Yaş problemleri"], "time_spent_minutes": 30,
        "study_date": "2024-05-01",
    }
    payload.update(overrides)
    return payload


def _net(exam_id, subject="Matematik"):
    return {"exam_id": exam_id, "exam_type": "TYT", "subject": subject, "net_score": "25.5"}


def test_moods_newest_first(tmp_db):
    init_db(tmp_db)
    assert get_latest_mood(tmp_db) is None
    with patch("yks_dashboard.moods.utc_now", return_value="2024-05-01T08:00:00+00:00"):
        create_mood(tmp_db, {"mood": "😐"})
    with patch("yks_dashboard.moods.utc_now", return_value="2024-05-02T08:00:00+00:00"):
        create_mood(tmp_db, {"mood": "😊", "note": "Türev bitti"})
    moods = get_moods(tmp_db)
    assert [m.mood for m in moods] == ["😊", "😐"]
    assert get_latest_mood(tmp_db).note == "Türev bitti"


def test_goal_crud(tmp_db):
    init_db(tmp_db)
    goal = create_goal(tmp_db, {
        "title": "TYT Net", "targetValue": "75", "unit": "net", "timeframe": "haftalık",
    })
    assert goal.current_value == "0"
    assert get_goal(tmp_db, goal.id).timeframe is Timeframe.HAFTALIK

    updated = update_goal(tmp_db, goal.id, {"currentValue": "60", "completed": True})
    assert updated.current_value == "60"
    assert get_goal(tmp_db, goal.id).completed is True

    assert delete_goal(tmp_db, goal.id) is True
    assert delete_goal(tmp_db, goal.id) is False
    assert get_goals(tmp_db) == []
    with pytest.raises(NotFoundError):
        update_goal(tmp_db, goal.id, {"title": "x"})


def test_question_log_keeps_numbers_as_text(tmp_db):
    init_db(tmp_db)
    log = create_question_log(tmp_db, _log())
    stored = get_question_log(tmp_db, log.id)
    assert stored.correct_count == "10"
    assert stored.wrong_topics == ["Yaş problemleri"]
    assert stored.time_spent_minutes == 30
    assert stored.exam_type is ExamType.TYT


def test_question_logs_by_date_range_is_inclusive(tmp_db):
    init_db(tmp_db)
    for day in ("2024-05-01", "2024-05-03", "2024-05-05", "2024-05-07"):
        create_question_log(tmp_db, _log(study_date=day))
    logs = get_question_logs_by_date_range(tmp_db, "2024-05-03", "2024-05-05")
    assert [log.study_date for log in logs] == ["2024-05-05", "2024-05-03"]
    assert get_question_logs_by_date_range(tmp_db, "2024-06-01", "2024-06-30") == []


def test_question_log_update_and_delete(tmp_db):
    init_db(tmp_db)
    log = create_question_log(tmp_db, _log())
    assert update_question_log(tmp_db, log.id, {"wrong_count": "4"}).wrong_count == "4"
    assert get_question_log(tmp_db, log.id).correct_count == "10"
    assert delete_question_log(tmp_db, log.id) is True
    with pytest.raises(NotFoundError):
        get_question_log(tmp_db, log.id)


def test_delete_all_question_logs(tmp_db):
    init_db(tmp_db)
    create_question_log(tmp_db, _log())
    create_question_log(tmp_db, _log(subject="Fizik"))
    assert delete_all_question_logs(tmp_db) is True
    assert get_question_logs(tmp_db) == []
    # Clearing an empty table still succeeds
    assert delete_all_question_logs(tmp_db) is True


def test_exam_result_crud(tmp_db):
    init_db(tmp_db)
    exam = create_exam_result(tmp_db, {"exam_name": "Deneme 1", "exam_date": "2024-05-01",
                                       "tyt_net": "68.75"})
    assert exam.ayt_net == "0"
    assert get_exam_result(tmp_db, exam.id).tyt_net == "68.75"
    assert [e.id for e in get_exam_results(tmp_db)] == [exam.id]
    with pytest.raises(NotFoundError):
        get_exam_result(tmp_db, "missing")


def test_subject_nets_are_listed_by_subject(tmp_db):
    init_db(tmp_db)
    exam = create_exam_result(tmp_db, {"exam_name": "Deneme", "exam_date": "2024-05-01"})
    create_exam_subject_net(tmp_db, _net(exam.id, "Türkçe"))
    create_exam_subject_net(tmp_db, _net(exam.id, "Fizik"))
    subjects = [n.subject for n in get_exam_subject_nets_by_exam_id(tmp_db, exam.id)]
    assert subjects == ["Fizik", "Türkçe"]


def test_subject_net_requires_existing_exam(tmp_db):
    init_db(tmp_db)
    with pytest.raises(NotFoundError):
        create_exam_subject_net(tmp_db, _net("missing"))


def test_subject_net_update_and_delete(tmp_db):
    init_db(tmp_db)
    exam = create_exam_result(tmp_db, {"exam_name": "Deneme", "exam_date": "2024-05-01"})
    net = create_exam_subject_net(tmp_db, _net(exam.id))
    assert update_exam_subject_net(tmp_db, net.id, {"net_score": "30"}).net_score == "30"
    assert get_exam_subject_net(tmp_db, net.id).net_score == "30"
    assert delete_exam_subject_net(tmp_db, net.id) is True
    assert delete_exam_subject_net(tmp_db, net.id) is False


def test_deleting_exam_deletes_its_nets(tmp_db):
    init_db(tmp_db)
    exam = create_exam_result(tmp_db, {"exam_name": "A", "exam_date": "2024-05-01"})
    other = create_exam_result(tmp_db, {"exam_name": "B", "exam_date": "2024-05-02"})
    create_exam_subject_net(tmp_db, _net(exam.id))
    kept = create_exam_subject_net(tmp_db, _net(other.id))

    assert delete_exam_result(tmp_db, exam.id) is True
    assert get_exam_subject_nets_by_exam_id(tmp_db, exam.id) == []
    assert [n.id for n in get_exam_subject_nets(tmp_db)] == [kept.id]
    assert delete_exam_result(tmp_db, exam.id) is False


def test_delete_nets_by_exam_id(tmp_db):
    init_db(tmp_db)
    exam = create_exam_result(tmp_db, {"exam_name": "A", "exam_date": "2024-05-01"})
    create_exam_subject_net(tmp_db, _net(exam.id))
    assert delete_exam_subject_nets_by_exam_id(tmp_db, exam.id) is True
    assert delete_exam_subject_nets_by_exam_id(tmp_db, exam.id) is False
    assert get_exam_result(tmp_db, exam.id).exam_name == "A"


def test_delete_all_exam_results(tmp_db):
    init_db(tmp_db)
    exam = create_exam_result(tmp_db, {"exam_name": "A", "exam_date": "2024-05-01"})
    create_exam_subject_net(tmp_db, _net(exam.id))
    assert delete_all_exam_results(tmp_db) is True
    assert get_exam_results(tmp_db) == []
    assert get_exam_subject_nets(tmp_db) == []

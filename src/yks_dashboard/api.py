"""Flask application serving the dashboard records under /api."""
import logging

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from yks_dashboard import exams, flashcards, goals, moods, question_logs, tasks
from yks_dashboard.config import get_config
from yks_dashboard.db import init_db
from yks_dashboard.errors import NotFoundError, ValidationError
from yks_dashboard.logging_config import init_logging
from yks_dashboard.models import to_wire
from yks_dashboard.review import priority_topics, subject_solved_stats, topic_stats
from yks_dashboard.schema import validate_insert, validate_review, validate_update
from yks_dashboard.seed import seed_all

logger = logging.getLogger(__name__)

bp = Blueprint("api", __name__, url_prefix="/api")


def _db() -> str:
    return current_app.config["DATABASE"]


def _body():
    return request.get_json(silent=True)


def _records(records):
    return jsonify([to_wire(r) for r in records])


def _created(record):
    return jsonify(to_wire(record)), 201


def _deleted(found: bool, what: str):
    if not found:
        raise NotFoundError(f"{what} not found")
    return "", 204


def _update(entity: str, load, save, record_id: str):
    existing = load(_db(), record_id)
    updates = validate_update(entity, to_wire(existing), _body())
    return jsonify(to_wire(save(_db(), record_id, updates)))


# Tasks

@bp.route("/tasks")
def list_tasks():
    return _records(tasks.get_tasks(_db()))


@bp.route("/tasks", methods=["POST"])
def create_task():
    return _created(tasks.create_task(_db(), validate_insert("task", _body())))


@bp.route("/tasks/<task_id>")
def get_task(task_id):
    return jsonify(to_wire(tasks.get_task(_db(), task_id)))


@bp.route("/tasks/<task_id>", methods=["PUT"])
def update_task(task_id):
    return _update("task", tasks.get_task, tasks.update_task, task_id)


@bp.route("/tasks/<task_id>/toggle", methods=["PATCH"])
def toggle_task(task_id):
    return jsonify(to_wire(tasks.toggle_task_complete(_db(), task_id)))


@bp.route("/tasks/<task_id>", methods=["DELETE"])
def delete_task(task_id):
    return _deleted(tasks.delete_task(_db(), task_id), "Task")


@bp.route("/calendar/<date_iso>")
def calendar_day(date_iso):
    return jsonify(tasks.get_calendar_day(_db(), date_iso))


@bp.route("/summary/daily")
def daily_summary():
    range_arg = request.args.get("range", "30")
    if not range_arg.isdecimal() or int(range_arg) < 1:
        raise ValidationError("range: must be a positive integer")
    return jsonify(tasks.get_daily_summary(_db(), int(range_arg)))


# Moods

@bp.route("/moods")
def list_moods():
    return _records(moods.get_moods(_db()))


@bp.route("/moods/latest")
def latest_mood():
    mood = moods.get_latest_mood(_db())
    return jsonify(to_wire(mood) if mood else None)


@bp.route("/moods", methods=["POST"])
def create_mood():
    return _created(moods.create_mood(_db(), validate_insert("mood", _body())))


# Goals

@bp.route("/goals")
def list_goals():
    return _records(goals.get_goals(_db()))


@bp.route("/goals", methods=["POST"])
def create_goal():
    return _created(goals.create_goal(_db(), validate_insert("goal", _body())))


@bp.route("/goals/<goal_id>")
def get_goal(goal_id):
    return jsonify(to_wire(goals.get_goal(_db(), goal_id)))


@bp.route("/goals/<goal_id>", methods=["PUT"])
def update_goal(goal_id):
    return _update("goal", goals.get_goal, goals.update_goal, goal_id)


@bp.route("/goals/<goal_id>", methods=["DELETE"])
def delete_goal(goal_id):
    return _deleted(goals.delete_goal(_db(), goal_id), "Goal")


# Question logs

@bp.route("/question-logs")
def list_question_logs():
    return _records(question_logs.get_question_logs(_db()))


@bp.route("/question-logs", methods=["POST"])
def create_question_log():
    payload = validate_insert("question_log", _body())
    return _created(question_logs.create_question_log(_db(), payload))


@bp.route("/question-logs/range")
def question_logs_in_range():
    start, end = request.args.get("start"), request.args.get("end")
    if not start or not end:
        raise ValidationError("start and end query parameters are required")
    return _records(question_logs.get_question_logs_by_date_range(_db(), start, end))


@bp.route("/question-logs/all", methods=["DELETE"])
def clear_question_logs():
    question_logs.delete_all_question_logs(_db())
    return "", 204


@bp.route("/question-logs/<log_id>", methods=["PUT"])
def update_question_log(log_id):
    return _update("question_log", question_logs.get_question_log,
                   question_logs.update_question_log, log_id)


@bp.route("/question-logs/<log_id>", methods=["DELETE"])
def delete_question_log(log_id):
    return _deleted(question_logs.delete_question_log(_db(), log_id), "Question log")


# Exam results and subject nets

@bp.route("/exam-results")
def list_exam_results():
    return _records(exams.get_exam_results(_db()))


@bp.route("/exam-results", methods=["POST"])
def create_exam_result():
    return _created(exams.create_exam_result(_db(), validate_insert("exam_result", _body())))


@bp.route("/exam-results/all", methods=["DELETE"])
def clear_exam_results():
    exams.delete_all_exam_results(_db())
    return "", 204


@bp.route("/exam-results/<exam_id>", methods=["DELETE"])
def delete_exam_result(exam_id):
    return _deleted(exams.delete_exam_result(_db(), exam_id), "Exam result")


@bp.route("/exam-subject-nets")
def list_exam_subject_nets():
    return _records(exams.get_exam_subject_nets(_db()))


@bp.route("/exam-subject-nets/exam/<exam_id>")
def exam_subject_nets_for_exam(exam_id):
    return _records(exams.get_exam_subject_nets_by_exam_id(_db(), exam_id))


@bp.route("/exam-subject-nets", methods=["POST"])
def create_exam_subject_net():
    payload = validate_insert("exam_subject_net", _body())
    return _created(exams.create_exam_subject_net(_db(), payload))


@bp.route("/exam-subject-nets/<net_id>", methods=["PUT"])
def update_exam_subject_net(net_id):
    return _update("exam_subject_net", exams.get_exam_subject_net,
                   exams.update_exam_subject_net, net_id)


@bp.route("/exam-subject-nets/<net_id>", methods=["DELETE"])
def delete_exam_subject_net(net_id):
    return _deleted(exams.delete_exam_subject_net(_db(), net_id), "Exam subject net")


# Analytics

@bp.route("/topics/stats")
def topics_stats():
    return jsonify(topic_stats(question_logs.get_question_logs(_db()), exams.get_exam_results(_db())))


@bp.route("/topics/priority")
def topics_priority():
    stats = topic_stats(question_logs.get_question_logs(_db()), exams.get_exam_results(_db()))
    return jsonify(priority_topics(stats))


@bp.route("/subjects/stats")
def subjects_stats():
    return jsonify(subject_solved_stats(question_logs.get_question_logs(_db())))


# Flashcards

@bp.route("/flashcards")
def list_flashcards():
    return _records(flashcards.get_flashcards(_db()))


@bp.route("/flashcards", methods=["POST"])
def create_flashcard():
    return _created(flashcards.create_flashcard(_db(), validate_insert("flashcard", _body())))


@bp.route("/flashcards/due")
def due_flashcards():
    return _records(flashcards.get_flashcards_due(_db()))


@bp.route("/flashcards/errors")
def flashcard_errors():
    return _records(flashcards.get_flashcard_errors(_db()))


@bp.route("/flashcards/errors/by-difficulty")
def flashcard_errors_by_difficulty():
    grouped = flashcards.get_flashcard_errors_by_difficulty(_db())
    return jsonify({level: [to_wire(e) for e in errors] for level, errors in grouped.items()})


@bp.route("/flashcards/<card_id>")
def get_flashcard(card_id):
    return jsonify(to_wire(flashcards.get_flashcard(_db(), card_id)))


@bp.route("/flashcards/<card_id>", methods=["PUT"])
def update_flashcard(card_id):
    return _update("flashcard", flashcards.get_flashcard, flashcards.update_flashcard, card_id)


@bp.route("/flashcards/<card_id>", methods=["DELETE"])
def delete_flashcard(card_id):
    return _deleted(flashcards.delete_flashcard(_db(), card_id), "Flashcard")


@bp.route("/flashcards/<card_id>/review", methods=["POST"])
def review_flashcard(card_id):
    review = validate_review(_body())
    card = flashcards.review_flashcard(
        _db(), card_id, review["difficulty"],
        is_correct=review["isCorrect"], user_answer=review["userAnswer"] or "",
    )
    return jsonify(to_wire(card))


# Error handlers

def handle_validation_error(e: ValidationError):
    return jsonify({"message": "Invalid data", "errors": e.errors}), 400


def handle_not_found(e: NotFoundError):
    return jsonify({"message": str(e)}), 404


def handle_unexpected(e: Exception):
    if isinstance(e, HTTPException):
        return jsonify({"message": e.description}), e.code
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"message": "Internal server error"}), 500


def create_app(config: dict | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(get_config())
    if config is not None:
        app.config.update(config)
    app.json.sort_keys = False

    init_logging(app)
    init_db(app.config["DATABASE"])
    if app.config.get("SEED_SAMPLE_DATA"):
        seed_all(app.config["DATABASE"])

    app.register_blueprint(bp)
    app.register_error_handler(ValidationError, handle_validation_error)
    app.register_error_handler(NotFoundError, handle_not_found)
    app.register_error_handler(Exception, handle_unexpected)
    return app

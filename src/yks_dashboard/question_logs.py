"""Question log storage: how many questions were solved, per subject and day."""
import logging

from yks_dashboard.db import (
    delete_row, get_connection, insert_row, new_id, update_row, utc_now,
)
from yks_dashboard.errors import NotFoundError
from yks_dashboard.models import QuestionLog, apply_updates, from_row, from_wire, to_row

logger = logging.getLogger(__name__)


def _load(conn, log_id: str) -> QuestionLog:
    row = conn.execute("SELECT * FROM question_logs WHERE id = ?", (log_id,)).fetchone()
    if row is None:
        raise NotFoundError(f"Question log {log_id} not found")
    return from_row(QuestionLog, row)


def get_question_logs(db_path: str) -> list[QuestionLog]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM question_logs ORDER BY created_at DESC").fetchall()
    conn.close()
    return [from_row(QuestionLog, row) for row in rows]


def get_question_log(db_path: str, log_id: str) -> QuestionLog:
    conn = get_connection(db_path)
    try:
        return _load(conn, log_id)
    finally:
        conn.close()


def get_question_logs_by_date_range(db_path: str, start_date: str, end_date: str) -> list[QuestionLog]:
    """Logs with start_date <= study_date <= end_date, latest study date first."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT * FROM question_logs
        WHERE study_date >= ? AND study_date <= ?
        ORDER BY study_date DESC""",
        (start_date, end_date),
    ).fetchall()
    conn.close()
    return [from_row(QuestionLog, row) for row in rows]


def create_question_log(db_path: str, payload: dict) -> QuestionLog:
    log = from_wire(QuestionLog, {**payload, "id": new_id(), "createdAt": utc_now()})
    conn = get_connection(db_path)
    insert_row(conn, "question_logs", to_row(log))
    conn.commit()
    conn.close()
    logger.info("Logged %s questions for %s on %s", log.exam_type.value, log.subject, log.study_date)
    return log


def update_question_log(db_path: str, log_id: str, updates: dict) -> QuestionLog:
    conn = get_connection(db_path)
    try:
        updated, changed = apply_updates(_load(conn, log_id), updates)
        update_row(conn, "question_logs", log_id, {k: v for k, v in to_row(updated).items() if k in changed})
        conn.commit()
        return updated
    finally:
        conn.close()


def delete_question_log(db_path: str, log_id: str) -> bool:
    conn = get_connection(db_path)
    deleted = delete_row(conn, "question_logs", log_id)
    conn.commit()
    conn.close()
    return deleted


def delete_all_question_logs(db_path: str) -> bool:
    conn = get_connection(db_path)
    count = conn.execute("DELETE FROM question_logs").rowcount
    conn.commit()
    conn.close()
    logger.info("Cleared %d question logs", count)
    return True

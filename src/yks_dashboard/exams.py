"""Mock exam results and their per-subject net scores."""
import logging

from yks_dashboard.db import (
    delete_row, get_connection, insert_row, new_id, update_row, utc_now,
)
from yks_dashboard.errors import NotFoundError
from yks_dashboard.models import (
    ExamResult, ExamSubjectNet, apply_updates, from_row, from_wire, to_row,
)

logger = logging.getLogger(__name__)


def get_exam_results(db_path: str) -> list[ExamResult]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM exam_results ORDER BY created_at DESC").fetchall()
    conn.close()
    return [from_row(ExamResult, row) for row in rows]


def get_exam_result(db_path: str, exam_id: str) -> ExamResult:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM exam_results WHERE id = ?", (exam_id,)).fetchone()
    conn.close()
    if row is None:
        raise NotFoundError(f"Exam result {exam_id} not found")
    return from_row(ExamResult, row)


def create_exam_result(db_path: str, payload: dict) -> ExamResult:
    result = from_wire(ExamResult, {**payload, "id": new_id(), "createdAt": utc_now()})
    conn = get_connection(db_path)
    insert_row(conn, "exam_results", to_row(result))
    conn.commit()
    conn.close()
    logger.info("Created exam result %s (%s)", result.id, result.exam_name)
    return result


def delete_exam_result(db_path: str, exam_id: str) -> bool:
    """Delete an exam result together with its subject nets."""
    conn = get_connection(db_path)
    deleted = delete_row(conn, "exam_results", exam_id)
    if deleted:
        conn.execute("DELETE FROM exam_subject_nets WHERE exam_id = ?", (exam_id,))
    conn.commit()
    conn.close()
    return deleted


def delete_all_exam_results(db_path: str) -> bool:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM exam_subject_nets")
    conn.execute("DELETE FROM exam_results")
    conn.commit()
    conn.close()
    return True


def get_exam_subject_nets(db_path: str) -> list[ExamSubjectNet]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM exam_subject_nets ORDER BY created_at DESC").fetchall()
    conn.close()
    return [from_row(ExamSubjectNet, row) for row in rows]


def get_exam_subject_nets_by_exam_id(db_path: str, exam_id: str) -> list[ExamSubjectNet]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM exam_subject_nets WHERE exam_id = ? ORDER BY subject", (exam_id,)
    ).fetchall()
    conn.close()
    return [from_row(ExamSubjectNet, row) for row in rows]


def create_exam_subject_net(db_path: str, payload: dict) -> ExamSubjectNet:
    """Insert a subject net; the referenced exam must exist."""
    get_exam_result(db_path, payload["exam_id"])
    net = from_wire(ExamSubjectNet, {**payload, "id": new_id(), "createdAt": utc_now()})
    conn = get_connection(db_path)
    insert_row(conn, "exam_subject_nets", to_row(net))
    conn.commit()
    conn.close()
    return net


def _load_net(conn, net_id: str) -> ExamSubjectNet:
    row = conn.execute("SELECT * FROM exam_subject_nets WHERE id = ?", (net_id,)).fetchone()
    if row is None:
        raise NotFoundError(f"Exam subject net {net_id} not found")
    return from_row(ExamSubjectNet, row)


def get_exam_subject_net(db_path: str, net_id: str) -> ExamSubjectNet:
    conn = get_connection(db_path)
    try:
        return _load_net(conn, net_id)
    finally:
        conn.close()


def update_exam_subject_net(db_path: str, net_id: str, updates: dict) -> ExamSubjectNet:
    conn = get_connection(db_path)
    try:
        updated, changed = apply_updates(_load_net(conn, net_id), updates)
        update_row(conn, "exam_subject_nets", net_id, {k: v for k, v in to_row(updated).items() if k in changed})
        conn.commit()
        return updated
    finally:
        conn.close()


def delete_exam_subject_net(db_path: str, net_id: str) -> bool:
    conn = get_connection(db_path)
    deleted = delete_row(conn, "exam_subject_nets", net_id)
    conn.commit()
    conn.close()
    return deleted


def delete_exam_subject_nets_by_exam_id(db_path: str, exam_id: str) -> bool:
    conn = get_connection(db_path)
    count = conn.execute("DELETE FROM exam_subject_nets WHERE exam_id = ?", (exam_id,)).rowcount
    conn.commit()
    conn.close()
    return count > 0

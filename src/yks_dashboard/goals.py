"""Goal storage."""
import logging

from yks_dashboard.db import (
    delete_row, get_connection, insert_row, new_id, update_row, utc_now,
)
from yks_dashboard.errors import NotFoundError
from yks_dashboard.models import Goal, apply_updates, from_row, from_wire, to_row

logger = logging.getLogger(__name__)


def _load(conn, goal_id: str) -> Goal:
    row = conn.execute("SELECT * FROM goals WHERE id = ?", (goal_id,)).fetchone()
    if row is None:
        raise NotFoundError(f"Goal {goal_id} not found")
    return from_row(Goal, row)


def get_goals(db_path: str) -> list[Goal]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM goals ORDER BY created_at DESC").fetchall()
    conn.close()
    return [from_row(Goal, row) for row in rows]


def get_goal(db_path: str, goal_id: str) -> Goal:
    conn = get_connection(db_path)
    try:
        return _load(conn, goal_id)
    finally:
        conn.close()


def create_goal(db_path: str, payload: dict) -> Goal:
    goal = from_wire(Goal, {**payload, "id": new_id(), "createdAt": utc_now()})
    conn = get_connection(db_path)
    insert_row(conn, "goals", to_row(goal))
    conn.commit()
    conn.close()
    logger.info("Created goal %s", goal.id)
    return goal


def update_goal(db_path: str, goal_id: str, updates: dict) -> Goal:
    conn = get_connection(db_path)
    try:
        updated, changed = apply_updates(_load(conn, goal_id), updates)
        update_row(conn, "goals", goal_id, {k: v for k, v in to_row(updated).items() if k in changed})
        conn.commit()
        return updated
    finally:
        conn.close()


def delete_goal(db_path: str, goal_id: str) -> bool:
    conn = get_connection(db_path)
    deleted = delete_row(conn, "goals", goal_id)
    conn.commit()
    conn.close()
    return deleted

"""Task storage, completion toggling and calendar lookups."""
import logging
from dataclasses import replace
from datetime import date, timedelta

from yks_dashboard.db import (
    delete_row, get_connection, insert_row, new_id, update_row, utc_now,
)
from yks_dashboard.errors import NotFoundError, ValidationError
from yks_dashboard.models import (
    Priority, Task, apply_updates, from_row, from_wire, to_row, to_wire,
)
from yks_dashboard.moods import get_moods

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def _load(conn, task_id: str) -> Task:
    row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
    if row is None:
        raise NotFoundError(f"Task {task_id} not found")
    return from_row(Task, row)


def get_tasks(db_path: str) -> list[Task]:
    """All tasks, high priority first, newest first within a priority."""
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM tasks ORDER BY created_at DESC").fetchall()
    conn.close()
    tasks = [from_row(Task, row) for row in rows]
    return sorted(tasks, key=lambda t: PRIORITY_ORDER[t.priority])


def get_task(db_path: str, task_id: str) -> Task:
    conn = get_connection(db_path)
    try:
        return _load(conn, task_id)
    finally:
        conn.close()


def create_task(db_path: str, payload: dict) -> Task:
    """Insert a validated task payload; id, createdAt and completedAt are assigned here."""
    task = from_wire(Task, {**payload, "id": new_id(), "createdAt": utc_now(), "completedAt": None})
    conn = get_connection(db_path)
    insert_row(conn, "tasks", to_row(task))
    conn.commit()
    conn.close()
    logger.info("Created task %s", task.id)
    return task


def update_task(db_path: str, task_id: str, updates: dict) -> Task:
    conn = get_connection(db_path)
    try:
        task = _load(conn, task_id)
        updated, changed = apply_updates(task, updates)
        if "completed" in changed and updated.completed != task.completed:
            updated = _with_completion(updated, updated.completed)
            changed.add("completed_at")
        update_row(conn, "tasks", task_id, {k: v for k, v in to_row(updated).items() if k in changed})
        conn.commit()
        return updated
    finally:
        conn.close()


def _with_completion(task: Task, completed: bool) -> Task:
    return replace(task, completed=completed, completed_at=utc_now() if completed else None)


def toggle_task_complete(db_path: str, task_id: str) -> Task:
    """Flip completion; completedAt is stamped on false->true and cleared on true->false."""
    conn = get_connection(db_path)
    try:
        current = _load(conn, task_id)
        task = _with_completion(current, not current.completed)
        conn.execute(
            "UPDATE tasks SET completed=?, completed_at=? WHERE id=?",
            (int(task.completed), task.completed_at, task_id),
        )
        conn.commit()
        return task
    finally:
        conn.close()


def delete_task(db_path: str, task_id: str) -> bool:
    conn = get_connection(db_path)
    deleted = delete_row(conn, "tasks", task_id)
    conn.commit()
    conn.close()
    if deleted:
        logger.info("Deleted task %s", task_id)
    return deleted


def _parse_day(date_iso: str) -> date:
    try:
        return date.fromisoformat(date_iso[:10])
    except ValueError:
        raise ValidationError(f"date: {date_iso!r} is not a YYYY-MM-DD date")


def get_tasks_by_date(db_path: str, date_iso: str, today: date | None = None) -> list[Task]:
    """Tasks scheduled for a calendar date.

    A task belongs to the date of its dueDate. A task without a dueDate belongs
    to today only, and only if it was created today.
    """
    today_iso = (today or date.today()).isoformat()
    result = []
    for task in get_tasks(db_path):
        if task.due_date:
            if task.due_date[:10] == date_iso:
                result.append(task)
        elif date_iso == today_iso and task.created_at and task.created_at[:10] == today_iso:
            result.append(task)
    return result


def get_calendar_day(db_path: str, date_iso: str, today: date | None = None) -> dict:
    day = _parse_day(date_iso)
    today = today or date.today()
    tasks = get_tasks_by_date(db_path, day.isoformat(), today=today)
    return {
        "date": day.isoformat(),
        "dayNumber": day.day,
        "daysRemaining": (day - today).days,
        "tasks": [to_wire(t) for t in tasks],
        "tasksCount": len(tasks),
    }


def get_daily_summary(db_path: str, range_days: int = 30, today: date | None = None) -> list[dict]:
    """Per-day completion summary for the last range_days days, today first."""
    tasks = get_tasks(db_path)
    moods = get_moods(db_path)
    today = today or date.today()
    summary = []
    for offset in range(range_days):
        day = (today - timedelta(days=offset)).isoformat()
        done = [t for t in tasks if t.completed_at and t.completed_at[:10] == day]
        summary.append({
            "date": day,
            "tasksCompleted": len(done),
            "totalTasks": sum(1 for t in tasks if t.created_at and t.created_at[:10] <= day),
            "moods": [to_wire(m) for m in moods if m.created_at and m.created_at[:10] == day],
            "productivity": min(len(done) * 20, 100),
        })
    return summary

"""Derived dashboard views: today's tasks, latest notes and weekly activity.

Every function here is pure; it works on records already fetched through the
remote store and never reads the clock unless the caller leaves a reference
time out.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from yks_dashboard.errors import ParseError
from yks_dashboard.models import Task, parse_records

logger = logging.getLogger(__name__)

LATEST_NOTES_LIMIT = 3
NOTE_PREVIEW_LENGTH = 120
MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class TodaysTasks:
    date: str
    tasks: tuple
    completed_count: int
    total_count: int


@dataclass(frozen=True)
class ActivityMetric:
    label: str
    value: int
    previous: int
    trend: float


@dataclass(frozen=True)
class WeeklyActivity:
    metrics: tuple
    total_activity: int
    average_trend: float


def parse_count(value) -> int:
    """Read a numeric-as-text field as a non-negative integer."""
    if isinstance(value, bool):
        raise ParseError(f"not a count: {value!r}")
    if isinstance(value, int):
        count = value
    else:
        text = str(value).strip() if value is not None else ""
        if not text.isdecimal():
            raise ParseError(f"not a count: {value!r}")
        count = int(text)
    if count < 0:
        raise ParseError(f"negative count: {value!r}")
    return count


def count_or_zero(value) -> int:
    try:
        return parse_count(value)
    except ParseError as e:
        logger.debug("Treating %s as 0", e)
        return 0


def format_local_date(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


# Today's tasks

def _summarize(day: str, tasks) -> TodaysTasks:
    tasks = tuple(tasks)
    return TodaysTasks(
        date=day,
        tasks=tasks,
        completed_count=sum(1 for t in tasks if t.completed),
        total_count=len(tasks),
    )


def todays_task_list(tasks: list[Task], reference_date: date | None = None) -> TodaysTasks:
    """Tasks due on the reference date (local calendar date), in received order."""
    day = format_local_date(reference_date or date.today())
    return _summarize(day, (t for t in tasks if t.due_date and t.due_date[:10] == day))


def task_list_from_calendar(payload: dict) -> TodaysTasks:
    """Use the calendar endpoint's membership as-is."""
    return _summarize(payload["date"], parse_records(Task, payload.get("tasks")))


# Latest notes

def latest_notes(moods, limit: int = LATEST_NOTES_LIMIT) -> list:
    """Most recent moods carrying a note, newest first."""
    with_notes = [m for m in moods if m.note and m.note.strip()]
    with_notes.sort(key=lambda m: _parse_timestamp(m.created_at), reverse=True)
    return with_notes[:limit]


def truncate_note(text: str) -> str:
    if len(text) > NOTE_PREVIEW_LENGTH:
        return text[:NOTE_PREVIEW_LENGTH] + "..."
    return text


_UNKNOWN_TIME = datetime.min.replace(tzinfo=timezone.utc)


def _parse_timestamp(value) -> datetime:
    """Parse an ISO timestamp; missing or unreadable values sort as oldest."""
    if isinstance(value, datetime):
        moment = value
    elif not value:
        return _UNKNOWN_TIME
    else:
        try:
            moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unreadable timestamp %r", value)
            return _UNKNOWN_TIME
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def relative_time_label(created_at, now: datetime | None = None) -> str:
    """Label like "5 minutes ago"; a week or more falls back to a short date ("5 May")."""
    moment = _parse_timestamp(created_at)
    if moment == _UNKNOWN_TIME:
        return "unknown time"
    now = _parse_timestamp(now or datetime.now(timezone.utc))
    minutes = int((now - moment).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = hours // 24
    if days < 7:
        return _plural(days, "day")
    local = moment.astimezone(now.tzinfo)
    return f"{local.day} {MONTH_ABBR[local.month - 1]}"


# Weekly activity

def trend(recent: int, previous: int) -> float:
    if previous > 0:
        return (recent - previous) / previous * 100
    return 100.0 if recent > 0 else 0.0


def _question_total(log) -> int:
    return (count_or_zero(log.correct_count)
            + count_or_zero(log.wrong_count)
            + count_or_zero(log.blank_count))


def weekly_activity_summary(question_logs, tasks, exam_results, today: date | None = None) -> WeeklyActivity:
    """Compare the last seven days with the seven days before them.

    The recent window is [today-7, today]; the previous window is
    [today-14, today-7).
    """
    today = today or date.today()
    today_s = format_local_date(today)
    recent_start = format_local_date(today - timedelta(days=7))
    previous_start = format_local_date(today - timedelta(days=14))

    def in_recent(day):
        return bool(day) and recent_start <= day[:10] <= today_s

    def in_previous(day):
        return bool(day) and previous_start <= day[:10] < recent_start

    recent_logs = [log for log in question_logs if in_recent(log.study_date)]
    previous_logs = [log for log in question_logs if in_previous(log.study_date)]
    done = [t for t in tasks if t.completed and t.completed_at]

    pairs = [
        ("Questions solved",
         sum(_question_total(log) for log in recent_logs),
         sum(_question_total(log) for log in previous_logs)),
        ("Tasks completed",
         sum(1 for t in done if in_recent(t.completed_at)),
         sum(1 for t in done if in_previous(t.completed_at))),
        ("Study days",
         len({log.study_date[:10] for log in recent_logs}),
         len({log.study_date[:10] for log in previous_logs})),
        ("Practice exams",
         sum(1 for e in exam_results if in_recent(e.exam_date)),
         sum(1 for e in exam_results if in_previous(e.exam_date))),
    ]
    metrics = tuple(
        ActivityMetric(label=label, value=recent, previous=previous, trend=trend(recent, previous))
        for label, recent, previous in pairs
    )
    return WeeklyActivity(
        metrics=metrics,
        total_activity=sum(m.value for m in metrics),
        average_trend=sum(m.trend for m in metrics) / len(metrics),
    )

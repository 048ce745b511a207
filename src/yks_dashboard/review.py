"""Weak topic identification and per-subject solving statistics."""
import json
import logging

from yks_dashboard.dashboard import count_or_zero

logger = logging.getLogger(__name__)

EXAM_MENTION_WEIGHT = 2
MIN_MENTIONS = 2

# (priority, min mentions, min frequency %, color), checked in order
PRIORITY_LEVELS = [
    ("critical", 10, 50.0, "#DC2626"),
    ("high", 6, 30.0, "#EA580C"),
    ("medium", 3, 15.0, "#D97706"),
]
LOW_PRIORITY = ("low", "#16A34A")


def _exam_wrong_topics(exam) -> list[str]:
    if not exam.subjects_data:
        return []
    try:
        subjects = json.loads(exam.subjects_data)
    except ValueError:
        logger.debug("Skipping malformed subjects_data on exam %s", exam.id)
        return []
    if not isinstance(subjects, dict):
        return []
    topics = []
    for subject in subjects.values():
        wrong = subject.get("wrong_topics") if isinstance(subject, dict) else None
        if isinstance(wrong, list):
            topics.extend(t for t in wrong if isinstance(t, str) and t.strip())
    return topics


def topic_stats(question_logs, exam_results) -> list[dict]:
    """Topics answered wrong at least twice, most mentioned first.

    A topic listed on a question log counts once; one listed in an exam's
    subject breakdown counts twice. Frequency is the share of question logs
    (and exams) that mention the topic, relative to the number of logs.
    """
    mentions: dict[str, int] = {}
    sessions: dict[str, set] = {}
    for log in question_logs:
        for topic in log.wrong_topics or []:
            mentions[topic] = mentions.get(topic, 0) + 1
            sessions.setdefault(topic, set()).add(log.id)
    for exam in exam_results:
        for topic in _exam_wrong_topics(exam):
            mentions[topic] = mentions.get(topic, 0) + EXAM_MENTION_WEIGHT
            sessions.setdefault(topic, set()).add(f"exam_{exam.id}")

    total_logs = len(question_logs)
    stats = [
        {
            "topic": topic,
            "wrong_mentions": count,
            "total_sessions": len(sessions[topic]),
            "mention_frequency": len(sessions[topic]) / total_logs * 100 if total_logs else 0.0,
        }
        for topic, count in mentions.items()
        if count >= MIN_MENTIONS
    ]
    return sorted(stats, key=lambda s: s["wrong_mentions"], reverse=True)


def topic_priority(wrong_mentions: int, mention_frequency: float) -> tuple[str, str]:
    for priority, min_mentions, min_frequency, color in PRIORITY_LEVELS:
        if wrong_mentions >= min_mentions or mention_frequency >= min_frequency:
            return priority, color
    return LOW_PRIORITY


def priority_topics(stats: list[dict]) -> list[dict]:
    result = []
    for stat in stats:
        priority, color = topic_priority(stat["wrong_mentions"], stat["mention_frequency"])
        result.append({
            "topic": stat["topic"],
            "wrong_mentions": stat["wrong_mentions"],
            "mention_frequency": stat["mention_frequency"],
            "priority": priority,
            "color": color,
        })
    return result


def subject_solved_stats(question_logs) -> list[dict]:
    """Questions solved and minutes spent per subject, busiest subject first."""
    totals: dict[str, list[int]] = {}
    for log in question_logs:
        solved = (count_or_zero(log.correct_count)
                  + count_or_zero(log.wrong_count)
                  + count_or_zero(log.blank_count))
        entry = totals.setdefault(log.subject, [0, 0])
        entry[0] += solved
        entry[1] += log.time_spent_minutes or 0
    stats = [
        {
            "subject": subject,
            "total_questions": questions,
            "total_time_minutes": minutes,
            "average_time_per_question": minutes / questions,
        }
        for subject, (questions, minutes) in totals.items()
        if questions > 0
    ]
    return sorted(stats, key=lambda s: s["total_questions"], reverse=True)

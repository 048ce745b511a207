"""Data classes and closed enumerations for the dashboard records.

Attributes are snake_case; the JSON (wire) name of a field is kept in the
field metadata when it differs, so records round-trip with the camelCase keys
the HTTP API speaks. Numeric-as-text fields stay text.
"""
import json
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Optional, get_type_hints

from yks_dashboard.errors import ValidationError

DEFAULT_TASK_COLOR = "#8B5CF6"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskCategory(str, Enum):
    GENEL = "genel"
    TURKCE = "turkce"
    SOSYAL = "sosyal"
    MATEMATIK = "matematik"
    FIZIK = "fizik"
    KIMYA = "kimya"
    BIYOLOJI = "biyoloji"
    AYT_MATEMATIK = "ayt-matematik"
    AYT_FIZIK = "ayt-fizik"
    AYT_KIMYA = "ayt-kimya"
    AYT_BIYOLOJI = "ayt-biyoloji"


class RecurrenceType(str, Enum):
    NONE = "none"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class GoalCategory(str, Enum):
    TYT = "tyt"
    AYT = "ayt"
    SIRALAMA = "siralama"
    GENEL = "genel"


class Timeframe(str, Enum):
    GUNLUK = "günlük"
    HAFTALIK = "haftalık"
    AYLIK = "aylık"
    YILLIK = "yıllık"


class ExamType(str, Enum):
    TYT = "TYT"
    AYT = "AYT"


class FlashcardSubject(str, Enum):
    TURKCE = "turkce"
    MATEMATIK = "matematik"
    FIZIK = "fizik"
    KIMYA = "kimya"
    BIYOLOJI = "biyoloji"
    TARIH = "tarih"
    COGRAFYA = "cografya"
    FELSEFE = "felsefe"
    GENEL = "genel"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


def _wire(name: str, **kwargs):
    return field(metadata={"wire": name}, **kwargs)


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    description: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    category: TaskCategory = TaskCategory.GENEL
    color: Optional[str] = DEFAULT_TASK_COLOR
    completed: bool = False
    completed_at: Optional[str] = _wire("completedAt", default=None)
    due_date: Optional[str] = _wire("dueDate", default=None)
    recurrence_type: RecurrenceType = _wire("recurrenceType", default=RecurrenceType.NONE)
    recurrence_end_date: Optional[str] = _wire("recurrenceEndDate", default=None)
    created_at: Optional[str] = _wire("createdAt", default=None)


@dataclass(frozen=True)
class Mood:
    id: str
    mood: str
    mood_bg: Optional[str] = _wire("moodBg", default=None)
    note: Optional[str] = None
    created_at: Optional[str] = _wire("createdAt", default=None)


@dataclass(frozen=True)
class Goal:
    id: str
    title: str
    target_value: str = _wire("targetValue")
    unit: str = _wire("unit")
    description: Optional[str] = None
    current_value: str = _wire("currentValue", default="0")
    category: GoalCategory = GoalCategory.GENEL
    timeframe: Timeframe = Timeframe.AYLIK
    target_date: Optional[str] = _wire("targetDate", default=None)
    completed: bool = False
    created_at: Optional[str] = _wire("createdAt", default=None)


@dataclass(frozen=True)
class QuestionLog:
    id: str
    exam_type: ExamType
    subject: str
    correct_count: str
    wrong_count: str
    study_date: str
    topic: Optional[str] = None
    blank_count: str = "0"
    wrong_topics: list = field(default_factory=list)
    time_spent_minutes: Optional[int] = None
    created_at: Optional[str] = _wire("createdAt", default=None)


@dataclass(frozen=True)
class ExamResult:
    id: str
    exam_name: str
    exam_date: str
    tyt_net: str = "0"
    ayt_net: str = "0"
    subjects_data: Optional[str] = None  # JSON
    ranking: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = _wire("createdAt", default=None)


@dataclass(frozen=True)
class ExamSubjectNet:
    id: str
    exam_id: str
    exam_type: ExamType
    subject: str
    net_score: str
    correct_count: str = "0"
    wrong_count: str = "0"
    blank_count: str = "0"
    created_at: Optional[str] = _wire("createdAt", default=None)


@dataclass(frozen=True)
class Flashcard:
    id: str
    question: str
    answer: str
    exam_type: ExamType = _wire("examType", default=ExamType.TYT)
    subject: FlashcardSubject = FlashcardSubject.GENEL
    topic: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    last_reviewed: Optional[str] = _wire("lastReviewed", default=None)
    next_review: Optional[str] = _wire("nextReview", default=None)
    review_count: str = _wire("reviewCount", default="0")
    created_at: Optional[str] = _wire("createdAt", default=None)


@dataclass(frozen=True)
class FlashcardError:
    id: str
    card_id: str = _wire("cardId")
    question: str = ""
    topic: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    user_answer: str = _wire("userAnswer", default="")
    correct_answer: str = _wire("correctAnswer", default="")
    timestamp: Optional[str] = None


def wire_name(f) -> str:
    return f.metadata.get("wire", f.name)


def _convert(hint, value, name: str):
    if value is None:
        return None
    if isinstance(hint, type) and issubclass(hint, Enum):
        try:
            return hint(value)
        except ValueError:
            allowed = ", ".join(member.value for member in hint)
            raise ValidationError(f"{name}: {value!r} is not one of: {allowed}")
    if hint is bool:
        return bool(value)
    if hint is list and isinstance(value, str):
        return json.loads(value)
    return value


def attrs_from_wire(cls, data: dict) -> dict:
    """Map a (possibly partial) JSON dict onto attribute names with enums converted."""
    hints = get_type_hints(cls)
    attrs = {}
    for f in fields(cls):
        key = wire_name(f)
        if key in data:
            attrs[f.name] = _convert(hints[f.name], data[key], key)
    return attrs


def from_wire(cls, data: dict):
    """Build a record from its JSON form."""
    try:
        return cls(**attrs_from_wire(cls, data))
    except TypeError as e:
        raise ValidationError(f"{cls.__name__}: {e}")


def from_row(cls, row):
    """Build a record from a sqlite3.Row whose columns match the attribute names."""
    hints = get_type_hints(cls)
    keys = row.keys()
    values = {
        f.name: _convert(hints[f.name], row[f.name], f.name)
        for f in fields(cls)
        if f.name in keys
    }
    return cls(**values)


def to_wire(record) -> dict:
    out = {}
    for f in fields(record):
        value = getattr(record, f.name)
        out[wire_name(f)] = value.value if isinstance(value, Enum) else value
    return out


def to_row(record) -> dict:
    row = {}
    for f in fields(record):
        value = getattr(record, f.name)
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, bool):
            value = int(value)
        elif isinstance(value, list):
            value = json.dumps(value)
        row[f.name] = value
    return row


def parse_records(cls, items) -> list:
    """Convert a fetched JSON record set into typed records."""
    return [from_wire(cls, item) for item in items or []]


def apply_updates(record, updates: dict):
    """Return (updated copy, changed attribute names); id and createdAt never change."""
    changes = attrs_from_wire(type(record), updates)
    changes.pop("id", None)
    changes.pop("created_at", None)
    return replace(record, **changes), set(changes)

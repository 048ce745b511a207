"""Insert schemas: which fields a client may send, their types and closed sets.

Fields use their wire (JSON) names. System-assigned fields (id, createdAt,
Task.completedAt, Flashcard.reviewCount) and unknown keys are dropped.
"""
from datetime import date, datetime
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from yks_dashboard.errors import ValidationError
from yks_dashboard.models import (
    DEFAULT_TASK_COLOR, Difficulty, ExamType, FlashcardSubject, GoalCategory,
    Priority, RecurrenceType, TaskCategory, Timeframe,
)

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}(T\S+)?$"


class _InsertSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


def _real_date(value: Optional[str]) -> Optional[str]:
    """Reject dates that match the pattern but do not exist, like 2024-02-30."""
    if value is None:
        return value
    try:
        date.fromisoformat(value[:10])
        if len(value) > 10:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"not a valid date: {value}") from None
    return value


class InsertTask(_InsertSchema):
    title: StrictStr
    description: Optional[StrictStr] = None
    priority: Priority = Priority.MEDIUM
    category: TaskCategory = TaskCategory.GENEL
    color: Optional[StrictStr] = DEFAULT_TASK_COLOR
    completed: StrictBool = False
    dueDate: Optional[StrictStr] = Field(default=None, pattern=DATE_PATTERN)
    recurrenceType: RecurrenceType = RecurrenceType.NONE
    recurrenceEndDate: Optional[StrictStr] = Field(default=None, pattern=DATE_PATTERN)

    check_title = field_validator("title")(_not_blank)
    check_dates = field_validator("dueDate", "recurrenceEndDate")(_real_date)


class InsertMood(_InsertSchema):
    mood: StrictStr
    moodBg: Optional[StrictStr] = None
    note: Optional[StrictStr] = None

    check_mood = field_validator("mood")(_not_blank)


class InsertGoal(_InsertSchema):
    title: StrictStr
    description: Optional[StrictStr] = None
    targetValue: StrictStr
    currentValue: StrictStr = "0"
    unit: StrictStr
    category: GoalCategory = GoalCategory.GENEL
    timeframe: Timeframe = Timeframe.AYLIK
    targetDate: Optional[StrictStr] = Field(default=None, pattern=DATE_PATTERN)
    completed: StrictBool = False

    check_title = field_validator("title")(_not_blank)
    check_target_date = field_validator("targetDate")(_real_date)


class InsertQuestionLog(_InsertSchema):
    exam_type: ExamType
    subject: StrictStr
    topic: Optional[StrictStr] = None
    correct_count: StrictStr
    wrong_count: StrictStr
    blank_count: StrictStr = "0"
    wrong_topics: list[StrictStr] = Field(default_factory=list)
    time_spent_minutes: Optional[StrictInt] = Field(default=None, ge=0)
    study_date: StrictStr = Field(pattern=DATE_PATTERN)

    check_subject = field_validator("subject")(_not_blank)
    check_study_date = field_validator("study_date")(_real_date)


class InsertExamResult(_InsertSchema):
    exam_name: StrictStr
    exam_date: StrictStr = Field(pattern=DATE_PATTERN)
    tyt_net: StrictStr = "0"
    ayt_net: StrictStr = "0"
    subjects_data: Optional[StrictStr] = None
    ranking: Optional[StrictStr] = None
    notes: Optional[StrictStr] = None

    check_exam_name = field_validator("exam_name")(_not_blank)
    check_exam_date = field_validator("exam_date")(_real_date)


class InsertExamSubjectNet(_InsertSchema):
    exam_id: StrictStr
    exam_type: ExamType
    subject: StrictStr
    net_score: StrictStr
    correct_count: StrictStr = "0"
    wrong_count: StrictStr = "0"
    blank_count: StrictStr = "0"


class InsertFlashcard(_InsertSchema):
    question: StrictStr
    answer: StrictStr
    examType: ExamType = ExamType.TYT
    subject: FlashcardSubject = FlashcardSubject.GENEL
    topic: Optional[StrictStr] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    lastReviewed: Optional[StrictStr] = None
    nextReview: Optional[StrictStr] = None

    check_text = field_validator("question", "answer")(_not_blank)


class FlashcardReview(_InsertSchema):
    difficulty: Difficulty
    isCorrect: StrictBool = True
    userAnswer: Optional[StrictStr] = None


INSERT_SCHEMAS = {
    "task": InsertTask,
    "mood": InsertMood,
    "goal": InsertGoal,
    "question_log": InsertQuestionLog,
    "exam_result": InsertExamResult,
    "exam_subject_net": InsertExamSubjectNet,
    "flashcard": InsertFlashcard,
}


def _format_errors(exc: PydanticValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return messages


def _validate(schema, candidate) -> dict:
    if not isinstance(candidate, dict):
        raise ValidationError("payload must be a JSON object")
    try:
        model = schema.model_validate(candidate)
    except PydanticValidationError as e:
        raise ValidationError(_format_errors(e)) from e
    return model.model_dump(mode="json")


def validate_insert(entity: str, candidate) -> dict:
    """Validate a candidate insert and return the normalized payload.

    Raises ValidationError when a required field is missing, an enumerated
    value is outside its closed set, or a value has the wrong primitive type.
    """
    schema = INSERT_SCHEMAS.get(entity)
    if schema is None:
        raise ValueError(f"Unknown entity: {entity}")
    return _validate(schema, candidate)


def validate_review(candidate) -> dict:
    return _validate(FlashcardReview, candidate)


def validate_update(entity: str, existing: dict, updates) -> dict:
    """Validate a partial update against the merged record.

    Returns only the updated fields, normalized.
    """
    if not isinstance(updates, dict):
        raise ValidationError("payload must be a JSON object")
    normalized = validate_insert(entity, {**existing, **updates})
    return {key: normalized[key] for key in updates if key in normalized}

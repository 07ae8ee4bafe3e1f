"""
Domain entities - Core business objects.
These represent the business concepts, not database models.

Stores persist entities as plain dicts (``to_dict`` / ``from_dict``), keyed by
the string ``id`` field.
"""
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.logging_config import get_logger

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InvalidQuestionError(ValueError):
    """Raised when a question's answers break the exactly-one-correct rule."""
    pass


class FileStatus:
    ACTIVE = "ACTIVE"
    DELETED = "DELETED"


class QuizLevel:
    EASY = "ez"
    MEDIUM = "md"
    HARD = "hard"

    ALL = (EASY, MEDIUM, HARD)

    @classmethod
    def from_difficulty(cls, difficulty: str) -> str:
        """Map the job's difficulty word (easy/medium/hard) to a stored level."""
        return {"easy": cls.EASY, "medium": cls.MEDIUM, "hard": cls.HARD}.get(difficulty.lower(), cls.MEDIUM)


class _Record:
    """Dict conversion shared by every entity."""

    _datetime_fields: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for name in self._datetime_fields:
            value = data.get(name)
            if isinstance(value, datetime):
                data[name] = value.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        for name in cls._datetime_fields:
            if isinstance(values.get(name), str):
                values[name] = datetime.fromisoformat(values[name])
        return cls(**values)


@dataclass
class User(_Record):
    id: str
    username: str
    email: str
    name: str
    image: Optional[str] = None


@dataclass
class Subject(_Record):
    """A user's folder of study files. ``children`` holds file ids in upload order."""
    id: str
    user_id: str
    name: str
    color: str = "#4F46E5"
    children: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)

    _datetime_fields = ("created_at",)

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id


@dataclass
class File(_Record):
    """
    An uploaded study document.

    ``summary_content``, ``ai_match_score`` and ``summary_count`` are written by
    the file-processing worker; the rest by the HTTP handlers.
    """
    id: str
    name: str
    size_bytes: int
    mime_type: str
    storage_url: str
    storage_key: str
    subject_id: str
    user_id: str
    summary_content: Optional[str] = None
    ai_match_score: Optional[float] = None
    summary_count: int = 0
    quiz_count: int = 0
    status: str = FileStatus.ACTIVE
    uploaded_at: datetime = field(default_factory=utcnow)

    _datetime_fields = ("uploaded_at",)

    def is_active(self) -> bool:
        return self.status == FileStatus.ACTIVE

    def has_summary(self) -> bool:
        return bool(self.summary_content)


@dataclass
class Answer(_Record):
    content: str
    is_correct: bool = False
    explanation: str = ""


@dataclass
class Question(_Record):
    """A multiple-choice question. Exactly one answer must be correct."""
    id: str
    quiz_id: str
    name: str
    question: str
    answers: List[Answer]
    explanation: str = ""

    def __post_init__(self):
        self.answers = [a if isinstance(a, Answer) else Answer(**a) for a in self.answers]
        if len(self.answers) < 2:
            raise InvalidQuestionError(f"Question '{self.name}' needs at least two answers")
        correct = sum(1 for a in self.answers if a.is_correct)
        if correct != 1:
            raise InvalidQuestionError(
                f"Question '{self.name}' must have exactly one correct answer, found {correct}"
            )

    def correct_index(self) -> int:
        return next(i for i, a in enumerate(self.answers) if a.is_correct)


@dataclass
class Quiz(_Record):
    id: str
    name: str
    file_id: str
    level: str = QuizLevel.MEDIUM
    highest_score: int = -1
    attempt_count: int = 0
    created_at: datetime = field(default_factory=utcnow)

    _datetime_fields = ("created_at",)

    def __post_init__(self):
        if self.level not in QuizLevel.ALL:
            raise ValueError(f"Invalid quiz level: {self.level}")

    def record_attempt(self, score: int) -> None:
        """Count an attempt and keep the best score (0..100)."""
        self.attempt_count += 1
        self.highest_score = max(self.highest_score, score)

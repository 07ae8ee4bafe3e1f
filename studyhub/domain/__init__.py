"""
Domain layer - business entities independent of persistence and HTTP.
"""
from .entities import (
    Answer,
    File,
    FileStatus,
    InvalidQuestionError,
    Question,
    Quiz,
    QuizLevel,
    Subject,
    User,
)

__all__ = [
    "Answer",
    "File",
    "FileStatus",
    "InvalidQuestionError",
    "Question",
    "Quiz",
    "QuizLevel",
    "Subject",
    "User",
]

"""
Mappers between domain entities and DTOs.
Separates domain layer from API layer.
"""
from typing import List

from ..domain.entities import File, Question, Quiz, Subject, User
from .dto import AnswerDTO, FileDTO, QuestionDTO, QuizDTO, SubjectDTO, UserDTO


class FileMapper:
    """Maps between File entity and FileDTO."""

    @staticmethod
    def to_dto(file: File) -> FileDTO:
        """Convert domain entity to DTO."""
        return FileDTO(
            id=file.id,
            name=file.name,
            size_bytes=file.size_bytes,
            mime_type=file.mime_type,
            storage_url=file.storage_url,
            subject_id=file.subject_id,
            summary_content=file.summary_content,
            ai_match_score=file.ai_match_score,
            summary_count=file.summary_count,
            quiz_count=file.quiz_count,
            status=file.status,
            uploaded_at=file.uploaded_at.isoformat(),
        )

    @staticmethod
    def to_dto_list(files: List[File]) -> List[FileDTO]:
        return [FileMapper.to_dto(f) for f in files]


class SubjectMapper:

    @staticmethod
    def to_dto(subject: Subject, file_count: int) -> SubjectDTO:
        return SubjectDTO(
            id=subject.id,
            user_id=subject.user_id,
            name=subject.name,
            color=subject.color,
            file_count=file_count,
            created_at=subject.created_at.isoformat(),
        )


class UserMapper:

    @staticmethod
    def to_dto(user: User) -> UserDTO:
        return UserDTO(id=user.id, username=user.username, email=user.email, name=user.name, image=user.image)


class QuizMapper:
    """Maps quizzes and their questions."""

    @staticmethod
    def to_dto(quiz: Quiz) -> QuizDTO:
        return QuizDTO(
            id=quiz.id,
            name=quiz.name,
            file_id=quiz.file_id,
            level=quiz.level,
            highest_score=quiz.highest_score,
            attempt_count=quiz.attempt_count,
            created_at=quiz.created_at.isoformat(),
        )

    @staticmethod
    def question_to_dto(question: Question) -> QuestionDTO:
        return QuestionDTO(
            id=question.id,
            quiz_id=question.quiz_id,
            name=question.name,
            question=question.question,
            answers=[
                AnswerDTO(content=a.content, is_correct=a.is_correct, explanation=a.explanation)
                for a in question.answers
            ],
            explanation=question.explanation,
        )

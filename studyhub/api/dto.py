"""
Data Transfer Objects (DTOs) for API layer.
Separates API contracts from domain entities.

JSON uses camelCase keys; Python attributes stay snake_case.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class FileDTO(CamelModel):
    """File DTO for API responses."""
    id: str
    name: str
    size_bytes: int
    mime_type: str
    storage_url: str
    subject_id: str
    summary_content: Optional[str] = None
    ai_match_score: Optional[float] = None
    summary_count: int = 0
    quiz_count: int = 0
    status: str
    uploaded_at: str


class ProcessingDTO(CamelModel):
    """What was queued for background processing after an upload."""
    queued: bool = False
    error: Optional[str] = None
    quiz_queued: Optional[bool] = None
    quiz_error: Optional[str] = None


class UploadResponseDTO(CamelModel):
    file: FileDTO
    processing: ProcessingDTO


class PaginationDTO(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int


class FileListDTO(CamelModel):
    files: List[FileDTO]
    pagination: PaginationDTO


class SubjectCreateDTO(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    color: Optional[str] = None


class SubjectDTO(CamelModel):
    id: str
    user_id: str
    name: str
    color: str
    file_count: int
    created_at: str


class UserCreateDTO(CamelModel):
    username: str = Field(min_length=3, max_length=50)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    name: str = Field(min_length=1)
    image: Optional[str] = None


class UserDTO(CamelModel):
    id: str
    username: str
    email: str
    name: str
    image: Optional[str] = None


class AnswerDTO(CamelModel):
    content: str
    is_correct: bool = False
    explanation: str = ""


class QuestionCreateDTO(CamelModel):
    name: str
    question: str
    answers: List[AnswerDTO]
    explanation: str = ""


class QuestionDTO(QuestionCreateDTO):
    id: str
    quiz_id: str


class QuizCreateDTO(CamelModel):
    name: str = Field(min_length=1)
    level: str = "md"
    questions: List[QuestionCreateDTO] = Field(min_length=1)


class QuizDTO(CamelModel):
    id: str
    name: str
    file_id: str
    level: str
    highest_score: int
    attempt_count: int
    created_at: str


class QuizSubmitDTO(CamelModel):
    """Chosen answer index per question id."""
    answers: Dict[str, int]


class QuizResultDTO(CamelModel):
    score: int
    correct: int
    total: int
    highest_score: int
    attempt_count: int


class ErrorResponseDTO(BaseModel):
    """Error response DTO."""
    error: str
    status_code: int
    path: Optional[str] = None
    request_id: Optional[str] = None

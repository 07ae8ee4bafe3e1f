"""
Files Router - uploads, file records and raw file bytes.

Architecture:
- Router handles HTTP request/response only
- FileService handles validation, storage and job queueing

Example Usage:
    POST /files - Upload a file into a subject (optionally queue a summary/quiz)
    GET /subjects/{subject_id}/files - Paginated files of a subject
    GET /files/{file_id} - File detail
    DELETE /files/{file_id} - Soft delete
    GET /files/raw/{storage_key} - Stored bytes (download URL for local storage)
"""
import mimetypes
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import JSONResponse

from ..api.dto import FileDTO, FileListDTO, PaginationDTO, ProcessingDTO
from ..api.exceptions import BUSINESS_EXCEPTIONS, handle_business_exception
from ..api.mappers import FileMapper
from ..core.logging_config import get_logger
from ..services.file_service import FileService
from .dependencies import get_current_user_id, get_file_service

logger = get_logger(__name__)

router = APIRouter()


@router.post("/files", status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    subject_id: Optional[str] = Form(None, alias="subjectId"),
    subject: Optional[str] = Form(None),
    create_summary: bool = Form(False, alias="createSummary"),
    generate_quiz: bool = Form(False, alias="generateQuiz"),
    quiz_questions: int = Form(10, alias="quizQuestions"),
    quiz_difficulty: str = Form("medium", alias="quizDifficulty"),
    user_id: str = Depends(get_current_user_id),
    file_service: FileService = Depends(get_file_service),
):
    """
    Upload one file into a subject.

    The response never waits for background work:
    ``processing.queued`` tells whether the summary job reached the broker,
    ``processing.quizQueued`` the same for a quiz job.

    Raises:
        HTTPException: 400 invalid file or options, 404 unknown subject
    """
    content = await file.read()
    try:
        result = await file_service.upload_file(
            user_id=user_id,
            filename=file.filename or "",
            content=content,
            content_type=file.content_type,
            subject_id=subject_id or subject or "",
            create_summary=create_summary,
            generate_quiz=generate_quiz,
            quiz_questions=quiz_questions,
            quiz_difficulty=quiz_difficulty,
        )
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)

    processing = ProcessingDTO.model_validate(result["processing"])
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "file": FileMapper.to_dto(result["file"]).model_dump(by_alias=True),
            "processing": processing.model_dump(by_alias=True, exclude_none=True),
        },
    )


@router.get("/subjects/{subject_id}/files", response_model=FileListDTO)
async def list_subject_files(
    subject_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    file_service: FileService = Depends(get_file_service),
):
    """Active files of a subject, newest first."""
    try:
        files, pagination = await file_service.get_files_by_subject(user_id, subject_id, page=page, limit=limit)
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)
    return FileListDTO(files=FileMapper.to_dto_list(files), pagination=PaginationDTO(**pagination))


# Registered before /files/{file_id} so raw keys are never read as ids
@router.get("/files/raw/{storage_key:path}")
async def get_raw_file(storage_key: str, file_service: FileService = Depends(get_file_service)):
    """Serve stored bytes. Used as the source URL when storage is local."""
    try:
        data = await file_service.read_raw(storage_key)
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)

    media_type = mimetypes.guess_type(storage_key)[0] or "application/octet-stream"
    return Response(content=data, media_type=media_type)


@router.get("/files/{file_id}", response_model=FileDTO)
async def get_file(
    file_id: str,
    user_id: str = Depends(get_current_user_id),
    file_service: FileService = Depends(get_file_service),
):
    try:
        return FileMapper.to_dto(await file_service.get_file(user_id, file_id))
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)


@router.delete("/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: str,
    user_id: str = Depends(get_current_user_id),
    file_service: FileService = Depends(get_file_service),
):
    """Soft delete: the record is marked DELETED and its quizzes removed."""
    try:
        await file_service.delete_file(user_id, file_id)
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""
Subjects Router - a user's folders of study files.
"""
from typing import List

from fastapi import APIRouter, Depends, status

from ..api.dto import SubjectCreateDTO, SubjectDTO
from ..api.exceptions import BUSINESS_EXCEPTIONS, handle_business_exception
from ..api.mappers import SubjectMapper
from ..services.subject_service import SubjectService
from .dependencies import get_current_user_id, get_subject_service

router = APIRouter()


@router.post("/subjects", response_model=SubjectDTO, status_code=status.HTTP_201_CREATED)
async def create_subject(
    body: SubjectCreateDTO,
    user_id: str = Depends(get_current_user_id),
    subject_service: SubjectService = Depends(get_subject_service),
):
    try:
        subject = await subject_service.create_subject(user_id, body.name, body.color)
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)
    return SubjectMapper.to_dto(subject, 0)


@router.get("/subjects", response_model=List[SubjectDTO])
async def list_subjects(
    user_id: str = Depends(get_current_user_id),
    subject_service: SubjectService = Depends(get_subject_service),
):
    """The caller's subjects with their count of active files."""
    subjects = await subject_service.list_subjects(user_id)
    return [SubjectMapper.to_dto(subject, count) for subject, count in subjects]


@router.get("/subjects/{subject_id}", response_model=SubjectDTO)
async def get_subject(
    subject_id: str,
    user_id: str = Depends(get_current_user_id),
    subject_service: SubjectService = Depends(get_subject_service),
):
    try:
        subject, count = await subject_service.get_subject(user_id, subject_id)
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)
    return SubjectMapper.to_dto(subject, count)

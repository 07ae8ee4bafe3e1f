"""
Quizzes Router - quizzes attached to files, their questions and attempts.

Example Usage:
    POST /files/{file_id}/quizzes - Create a quiz with its questions
    GET /files/{file_id}/quizzes - Quizzes of a file
    GET /quizzes/{quiz_id} - Quiz detail
    GET /quizzes/{quiz_id}/questions - Questions with their answers
    POST /quizzes/{quiz_id}/submit - Score an attempt
"""
from typing import List

from fastapi import APIRouter, Depends, status

from ..api.dto import QuestionDTO, QuizCreateDTO, QuizDTO, QuizResultDTO, QuizSubmitDTO
from ..api.exceptions import BUSINESS_EXCEPTIONS, handle_business_exception
from ..api.mappers import QuizMapper
from ..services.quiz_service import QuizService
from .dependencies import get_current_user_id, get_quiz_service

router = APIRouter()


@router.post("/files/{file_id}/quizzes", response_model=QuizDTO, status_code=status.HTTP_201_CREATED)
async def create_quiz(
    file_id: str,
    body: QuizCreateDTO,
    user_id: str = Depends(get_current_user_id),
    quiz_service: QuizService = Depends(get_quiz_service),
):
    """
    Create a quiz. Every question needs at least two answers, exactly one of
    them correct; otherwise nothing is stored and 400 is returned.
    """
    questions = [q.model_dump() for q in body.questions]
    try:
        quiz = await quiz_service.create_quiz(user_id, file_id, body.name, body.level, questions)
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)
    return QuizMapper.to_dto(quiz)


@router.get("/files/{file_id}/quizzes", response_model=List[QuizDTO])
async def list_quizzes(
    file_id: str,
    user_id: str = Depends(get_current_user_id),
    quiz_service: QuizService = Depends(get_quiz_service),
):
    try:
        quizzes = await quiz_service.list_quizzes(user_id, file_id)
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)
    return [QuizMapper.to_dto(q) for q in quizzes]


@router.get("/quizzes/{quiz_id}", response_model=QuizDTO)
async def get_quiz(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    quiz_service: QuizService = Depends(get_quiz_service),
):
    try:
        return QuizMapper.to_dto(await quiz_service.get_quiz(user_id, quiz_id))
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)


@router.get("/quizzes/{quiz_id}/questions", response_model=List[QuestionDTO])
async def get_questions(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    quiz_service: QuizService = Depends(get_quiz_service),
):
    try:
        questions = await quiz_service.get_questions(user_id, quiz_id)
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)
    return [QuizMapper.question_to_dto(q) for q in questions]


@router.post("/quizzes/{quiz_id}/submit", response_model=QuizResultDTO)
async def submit_quiz(
    quiz_id: str,
    body: QuizSubmitDTO,
    user_id: str = Depends(get_current_user_id),
    quiz_service: QuizService = Depends(get_quiz_service),
):
    """Score one attempt; keeps the best score and counts attempts."""
    try:
        quiz, score, correct, total = await quiz_service.submit(user_id, quiz_id, body.answers)
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)
    return QuizResultDTO(
        score=score,
        correct=correct,
        total=total,
        highest_score=quiz.highest_score,
        attempt_count=quiz.attempt_count,
    )

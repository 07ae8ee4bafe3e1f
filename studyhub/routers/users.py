"""
Users Router - user records. Identity comes from the X-User-Id header.
"""
from fastapi import APIRouter, Depends, status

from ..api.dto import UserCreateDTO, UserDTO
from ..api.exceptions import BUSINESS_EXCEPTIONS, handle_business_exception
from ..api.mappers import UserMapper
from ..services.user_service import UserService
from .dependencies import get_current_user_id, get_user_service

router = APIRouter()


@router.post("/users", response_model=UserDTO, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreateDTO, user_service: UserService = Depends(get_user_service)):
    """
    Register a user.

    Raises:
        HTTPException: 409 if the username or email is taken
    """
    try:
        user = await user_service.create_user(body.username, body.email, body.name, body.image)
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)
    return UserMapper.to_dto(user)


@router.get("/users/me", response_model=UserDTO)
async def get_me(
    user_id: str = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
):
    try:
        return UserMapper.to_dto(await user_service.get_user(user_id))
    except BUSINESS_EXCEPTIONS as e:
        raise handle_business_exception(e)

"""
User Endpoints

Admin management of regular accounts.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from app.api.deps import get_current_admin, get_user_service
from app.models import User
from app.schemas.auth import ErrorResponse, MessageResponse, UserResponse
from app.services.user_service import UserService

router = APIRouter(tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    _: User = Depends(get_current_admin),
    user_service: UserService = Depends(get_user_service),
):
    """List regular (non-admin) accounts."""
    users = await user_service.list_users(skip=skip, limit=limit)
    return [UserResponse.model_validate(u) for u in users]


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields, weak password or email taken"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def update_user(
    user_id: int,
    first_name: str = Form(""),
    last_name: str = Form(""),
    email: str = Form(""),
    new_password: Optional[str] = Form(None),
    profile: Optional[UploadFile] = File(None),
    _: User = Depends(get_current_admin),
    user_service: UserService = Depends(get_user_service),
):
    """
    Edit an account. A new profile picture replaces the old one, which
    is deleted unless it is the shared placeholder.
    """
    user = await user_service.update_user(
        user_id,
        first_name=first_name,
        last_name=last_name,
        email=email,
        new_password=new_password,
        profile=profile,
    )
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def delete_user(
    user_id: int,
    _: User = Depends(get_current_admin),
    user_service: UserService = Depends(get_user_service),
):
    """Delete an account and its profile picture."""
    await user_service.delete_user(user_id)
    return MessageResponse(message="User deleted")

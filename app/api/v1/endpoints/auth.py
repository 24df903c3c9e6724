from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from app.schemas.auth import (
    UserLogin,
    TokenResponse,
    TokenRefreshResponse,
    RefreshTokenRequest,
    UserResponse,
    ErrorResponse,
    PasswordResetRequest,
    PasswordResetRequestResponse,
    PasswordResetConfirm,
    VerifyResetCodeRequest,
    MessageResponse,
)
from app.services.auth_service import AuthService
from app.services.password_reset_service import PasswordResetService
from app.services.user_service import UserService
from app.api.deps import (
    get_auth_service,
    get_current_user,
    get_password_reset_service,
    get_user_service,
)
from app.models import User

# ============================================================
# Router Setup
# ============================================================

router = APIRouter(tags=["Authentication"])


# ============================================================
# Registration Endpoint
# ============================================================

@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields, weak password or email taken"},
    }
)
async def register(
    first_name: str = Form(""),
    last_name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    profile: Optional[UploadFile] = File(None, description="Optional profile picture"),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Register a new user account (multipart form).

    Without a profile picture the shared placeholder is used.
    """
    user = await auth_service.register(first_name, last_name, email, password, profile)
    return UserResponse.model_validate(user)


# ============================================================
# Login Endpoint
# ============================================================

@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    }
)
async def login(
    login_data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Authenticate user and get tokens plus the account profile.
    """
    return await auth_service.login(login_data.email, login_data.password)


# ============================================================
# Token Refresh Endpoint
# ============================================================

@router.post(
    "/refresh",
    response_model=TokenRefreshResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid refresh token"},
    }
)
async def refresh_token(
    token_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Get new access token using refresh token."""
    return await auth_service.refresh_token(token_data.refresh_token)


# ============================================================
# Current User Endpoints
# ============================================================

@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """
    Get current authenticated user's information.

    Requires `Authorization: Bearer <access_token>`.
    """
    return UserResponse.model_validate(current_user)


@router.put(
    "/me",
    response_model=UserResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or weak password"},
        401: {"model": ErrorResponse, "description": "Current password is incorrect"},
    },
)
async def update_me(
    first_name: str = Form(""),
    last_name: str = Form(""),
    old_password: Optional[str] = Form(None),
    new_password: Optional[str] = Form(None),
    profile: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    """
    Update the caller's names, password and/or profile picture.

    Setting a new password requires the current one.
    """
    user = await user_service.update_user(
        current_user.id,
        first_name=first_name,
        last_name=last_name,
        new_password=new_password,
        current_password=old_password,
        require_current_password=True,
        profile=profile,
    )
    return UserResponse.model_validate(user)


# ============================================================
# Forgot Password Endpoint
# ============================================================

@router.post(
    "/forgot-password",
    response_model=PasswordResetRequestResponse,
    response_model_exclude_none=True,
    responses={
        404: {"model": ErrorResponse, "description": "No account with this email"},
        503: {"model": ErrorResponse, "description": "Reset code could not be delivered"},
    }
)
async def forgot_password(
    request_data: PasswordResetRequest,
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    """
    Request a 6-digit password reset code.

    The code is valid for a few minutes and replaces any code issued
    before it.
    """
    result = await reset_service.request_reset(request_data.email)
    return PasswordResetRequestResponse(
        message=result.message,
        expires_in_minutes=result.expires_in_minutes,
        code=result.code,
    )


# ============================================================
# Verify Reset Code Endpoint
# ============================================================

@router.post(
    "/verify-reset-code",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No, expired or wrong code"},
    }
)
async def verify_reset_code(
    request_data: VerifyResetCodeRequest,
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    """
    Check a reset code without using it up.
    """
    reset_service.verify_code(request_data.email, request_data.code)
    return MessageResponse(message="Reset code is valid")


# ============================================================
# Reset Password Endpoint
# ============================================================

@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields, bad code or weak password"},
        500: {"model": ErrorResponse, "description": "Password not saved, request a new code"},
    }
)
async def reset_password(
    request_data: PasswordResetConfirm,
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    """
    Reset password using a valid reset code.

    A successful reset uses up the code.
    """
    await reset_service.reset_password(
        request_data.email,
        request_data.code,
        request_data.new_password
    )
    return MessageResponse(
        message="Password has been reset successfully. You can now log in with your new password."
    )

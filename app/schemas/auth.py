from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional
from datetime import datetime


# ============================================================
# Request Schemas (What client sends)
# ============================================================

class UserLogin(BaseModel):
    """Schema for user login request"""

    email: EmailStr
    password: str

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "email": "viewer@example.com",
            "password": "secret123"
        }
    })


class RefreshTokenRequest(BaseModel):
    """Schema for token refresh request"""

    refresh_token: str


class PasswordResetRequest(BaseModel):
    """Schema for forgot-password request"""
    email: str = ""


class VerifyResetCodeRequest(BaseModel):
    """Schema for checking a reset code before choosing a password"""
    email: str = ""
    code: str = ""


class PasswordResetConfirm(BaseModel):
    """
    Schema for setting a new password with a reset code.

    Fields are plain strings on purpose: empty or short values are
    reported by the service as structured errors instead of 422s.
    """
    email: str = ""
    code: str = ""
    new_password: str = ""

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "email": "viewer@example.com",
            "code": "482913",
            "new_password": "newpass1"
        }
    })


# ============================================================
# Response Schemas (What server sends back)
# ============================================================

class MessageResponse(BaseModel):
    """Schema for simple message responses"""
    message: str
    success: bool = True


class PasswordResetRequestResponse(MessageResponse):
    """
    Acknowledgement of a forgot-password request.

    ``code`` is only present when the server is configured to echo it
    (PASSWORD_RESET_ECHO_CODE); hardened deployments leave it out.
    """
    expires_in_minutes: int
    code: Optional[str] = None


class UserResponse(BaseModel):
    """Schema for user data in responses (NO password!)"""

    id: int
    email: str
    first_name: str
    last_name: str
    profile: str
    role: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Schema for authentication token response"""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until access token expires
    user: UserResponse


class TokenRefreshResponse(BaseModel):
    """Schema for token refresh response"""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


# ============================================================
# Error Schemas
# ============================================================

class ErrorResponse(BaseModel):
    """Schema for error responses"""

    detail: str
    error: Optional[str] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "detail": "The reset code has expired, request a new one",
            "error": "expired"
        }
    })

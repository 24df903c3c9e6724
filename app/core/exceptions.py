"""
Application Exceptions

Expected, user-facing failures raised by services.

Every error carries a stable ``error_code`` that clients can switch on
and the HTTP status the API layer answers with. The exception handler
registered in ``app.main`` turns them into::

    {"detail": "<message>", "error": "<error_code>"}

Anything that is not an ``AppError`` is treated as a server fault and
reported as a generic 500 without internal detail.
"""

from typing import Optional


class AppError(Exception):
    """Base class for all expected service errors."""

    error_code: str = "app_error"
    status_code: int = 400
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ============================================================
# Password reset
# ============================================================

class AccountNotFoundError(AppError):
    error_code = "account_not_found"
    status_code = 404
    default_message = "No account is registered with this email"


class NotifierUnavailableError(AppError):
    error_code = "notifier_unavailable"
    status_code = 503
    default_message = "The reset code could not be delivered, please try again later"


class NoChallengeError(AppError):
    error_code = "no_challenge"
    status_code = 400
    default_message = "No pending reset code for this email, request a new one"


class ChallengeExpiredError(AppError):
    error_code = "expired"
    status_code = 400
    default_message = "The reset code has expired, request a new one"


class CodeMismatchError(AppError):
    error_code = "code_mismatch"
    status_code = 400
    default_message = "The reset code is incorrect"


class WeakPasswordError(AppError):
    error_code = "weak_password"
    status_code = 400
    default_message = "Password is too short"


class MissingFieldsError(AppError):
    error_code = "missing_fields"
    status_code = 400
    default_message = "Please fill in all required fields"


class PersistenceError(AppError):
    error_code = "persistence_error"
    status_code = 500
    default_message = (
        "The new password could not be saved. "
        "The code has been used up, please request a new one"
    )


# ============================================================
# Accounts and catalog
# ============================================================

class EmailAlreadyRegisteredError(AppError):
    error_code = "email_taken"
    status_code = 400
    default_message = "A user with this email already exists"


class InvalidCredentialsError(AppError):
    error_code = "invalid_credentials"
    status_code = 401
    default_message = "Invalid email or password"


class MovieNotFoundError(AppError):
    error_code = "movie_not_found"
    status_code = 404
    default_message = "Movie not found"


class InvalidUploadError(AppError):
    error_code = "invalid_upload"
    status_code = 400
    default_message = "Uploaded file is not acceptable"

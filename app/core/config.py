from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import EmailStr, Field, field_validator
import secrets


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables or .env.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"  # Ignore extra fields in .env file
    )

    # -------------------------
    # Database
    # -------------------------
    DATABASE_URL: str = "sqlite+aiosqlite:///./movie_stream.db"
    SQLALCHEMY_ECHO: bool = False

    # -------------------------
    # Security / Auth
    # -------------------------
    SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # bcrypt cost factor (log2 of the key-expansion rounds)
    BCRYPT_ROUNDS: int = Field(default=10, ge=4, le=31)

    PASSWORD_MIN_LENGTH: int = Field(default=6, ge=1)

    # -------------------------
    # Password Reset
    # -------------------------
    PASSWORD_RESET_CODE_EXPIRE_MINUTES: int = Field(default=5, ge=1)

    # When enabled the forgot-password response carries the code as well,
    # so a mobile client can surface it as a local notification.
    # Turn this off for any deployment that needs the side channel to be
    # the only way to learn the code.
    PASSWORD_RESET_ECHO_CODE: bool = True

    # -------------------------
    # Notifier
    # -------------------------
    NOTIFIER_BACKEND: str = Field(
        default="log",
        description="How reset codes are delivered: 'smtp' or 'log'"
    )
    NOTIFIER_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    # -------------------------
    # Email / SMTP
    # -------------------------
    SMTP_EMAIL: Optional[EmailStr] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_SERVER: Optional[str] = None
    SMTP_PORT: Optional[int] = None
    MAIL_FROM_NAME: str = "Movie App"

    # -------------------------
    # Application
    # -------------------------
    PROJECT_NAME: str = "Movie Stream API"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:8081"])

    # -------------------------
    # File Storage
    # -------------------------
    STORAGE_BACKEND: str = Field(
        default="local",
        description="Storage backend: 'local' is the only one shipped"
    )
    UPLOAD_DIR: str = Field(
        default="storage/uploads",
        description="Directory for uploaded files (local storage)"
    )
    MAX_FILE_SIZE_MB: int = Field(
        default=200,
        ge=1,
        le=2048,
        description="Maximum upload size in megabytes (videos included)"
    )
    DEFAULT_PROFILE_ASSET: str = Field(
        default="default.png",
        description="Shared placeholder profile picture, never deleted"
    )

    @property
    def MAX_FILE_SIZE_BYTES(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    @field_validator("ALGORITHM")
    def validate_algorithm(cls, v):
        if not v or not isinstance(v, str):
            raise ValueError("ALGORITHM must be a non-empty string.")
        return v

    @field_validator("STORAGE_BACKEND")
    def validate_storage_backend(cls, v):
        """Ensure storage backend is a valid option."""
        allowed = {"local"}
        if v not in allowed:
            raise ValueError(f"STORAGE_BACKEND must be one of: {allowed}")
        return v

    @field_validator("NOTIFIER_BACKEND")
    def validate_notifier_backend(cls, v):
        allowed = {"smtp", "log"}
        if v not in allowed:
            raise ValueError(f"NOTIFIER_BACKEND must be one of: {allowed}")
        return v


settings = Settings()

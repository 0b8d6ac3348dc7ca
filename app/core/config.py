"""Application configuration with environment variables."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./documents.db"
    DB_FAIL_FAST: bool = True

    # Session cookie
    SESSION_SECRET: str = "change-this-session-secret-in-production"
    SESSION_COOKIE: str = "vault_session"
    SESSION_MAX_AGE: int = 60 * 60 * 24  # 24 hours
    SESSION_HTTPS_ONLY: bool = False

    # Shared login credential
    APP_USERNAME: str = "admin"
    APP_PASSWORD: str = "change-this-password"

    # Application
    APP_NAME: str = "Document Vault"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Object storage (S3 API)
    S3_BUCKET: str = "documents"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: Optional[str] = None
    STORAGE_PUBLIC_BASE_URL: Optional[str] = None
    STORAGE_FOLDER: str = "documents"

    # Uploads / downloads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_EXTENSIONS: list[str] = ["jpg", "jpeg", "png", "gif", "pdf", "doc", "docx", "txt"]
    DOWNLOAD_MODE: str = "proxy"  # "proxy" or "redirect"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create global settings instance
settings = Settings()

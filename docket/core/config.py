# docket/core/config.py
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        DATABASE_URL: SQLAlchemy URL of the relational datastore
        DB_STATEMENT_TIMEOUT_MS: server-side statement timeout (PostgreSQL only)
        BLOB_BACKEND: "local" (files under UPLOAD_DIR) or "s3"
        UPLOAD_DIR: root directory for the local blob backend
        S3_*: bucket and credentials for the S3 blob backend
        STORAGE_TIMEOUT_SECONDS: default bound on blob and metadata writes
        MAX_UPLOAD_SIZE_BYTES: largest accepted upload
        ALLOWED_UPLOAD_TYPES: accepted MIME types, empty means any
        JWT_SECRET: secret used to verify bearer tokens
        RECENT_WINDOW_DAYS: trailing window for "recent" documents in statistics
    """
    DATABASE_URL: str = "sqlite:///./docket.db"
    DB_STATEMENT_TIMEOUT_MS: int = 10000

    BLOB_BACKEND: str = "local"
    UPLOAD_DIR: str = "./uploads"
    S3_BUCKET: Optional[str] = None
    S3_ENDPOINT: Optional[str] = None
    S3_ACCESS_KEY: Optional[str] = None
    S3_SECRET_KEY: Optional[str] = None
    S3_REGION: str = "us-east-1"
    STORAGE_TIMEOUT_SECONDS: float = 30.0

    MAX_UPLOAD_SIZE_BYTES: int = 50 * 1024 * 1024
    ALLOWED_UPLOAD_TYPES: List[str] = []

    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    RECENT_WINDOW_DAYS: int = 7
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()

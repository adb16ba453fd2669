# jobboard/core/config.py
from typing import Optional
from pydantic import AnyUrl
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    # comma separated list, "*" allows every origin
    CORS_ORIGINS: str = "*"

    # Sessions / credentials
    SECRET_KEY: str = "change-me"  # override in .env / secrets
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30
    # bcrypt cost factor; tests lower this through the environment
    PASSWORD_HASH_ROUNDS: int = 10
    RESET_TOKEN_EXPIRE_MINUTES: int = 10

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017/jobboard"
    MONGODB_DB: str = "jobboard"

    # S3 / R2 object storage for uploads
    S3_BUCKET: Optional[str] = None
    S3_ENDPOINT: Optional[AnyUrl] = None
    S3_REGION: Optional[str] = None
    S3_ACCESS_KEY: Optional[str] = None
    S3_SECRET_KEY: Optional[str] = None
    # public base url of the bucket; presigned urls are returned when unset
    S3_PUBLIC_URL: Optional[str] = None
    S3_PRESIGN_EXPIRES_SEC: int = 60 * 60 * 24 * 7

    # Local fallback when no object storage is configured
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    CV_MAX_BYTES: int = 10 * 1024 * 1024
    IMAGE_MAX_BYTES: int = 5 * 1024 * 1024

    # Email: 'mock' or 'http'
    EMAIL_ADAPTER: str = "mock"
    EMAIL_HTTP_URL: Optional[AnyUrl] = None
    EMAIL_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "no-reply@jobboard.local"
    EMAIL_TIMEOUT_SEC: int = 10
    EMAIL_RETRIES: int = 2
    EMAIL_BACKOFF_FACTOR: float = 0.5

    # Pydantic v2 settings: read from .env file
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

# single shared settings instance
settings = Settings()

# Defines application-wide settings using pydantic-settings' BaseSettings
# Manages environment variables for various aspects of the application:
# API configuration (prefix, project name)
# Security settings (secret key, JWT algorithm, token lifetime)
# Database connection details
# File storage (local uploads directory or Cloudflare R2) and upload limits
# CORS allow-lists


import json
from typing import Annotated, List, Union

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

load_dotenv()

DEFAULT_SECRET_KEY = "development_secret_key"


class Settings(BaseSettings):
    # API configuration
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "StarterBlog API"
    VERSION: str = "1.0.0"

    # Server URLs
    BASE_URL: str = "http://localhost:8000"

    # Security
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day
    ALGORITHM: str = "HS256"

    # Database
    DATABASE_URL: str = "sqlite:///./starterblog.db"

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    BACKEND_CORS_METHODS: Annotated[List[str], NoDecode] = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
    BACKEND_CORS_HEADERS: Annotated[List[str], NoDecode] = ["Authorization", "Content-Type"]

    # File uploads
    UPLOAD_DIRECTORY: str = "uploads"
    UPLOADS_URL_PATH: str = "/uploads"
    STORAGE_BACKEND: str = "local"  # "local" or "r2"
    MAX_THUMBNAIL_SIZE: int = 2_000_000
    MAX_AVATAR_SIZE: int = 500_000

    # Cloudflare R2 Storage
    R2_ENDPOINT: str = ""
    R2_ACCESS_KEY_ID: str = ""
    R2_SECRET_ACCESS_KEY: str = ""
    R2_BUCKET_NAME: str = "starterblog-uploads"
    R2_PUBLIC_URL: str = ""

    # Development settings - set these differently in production
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("BACKEND_CORS_ORIGINS", "BACKEND_CORS_METHODS", "BACKEND_CORS_HEADERS", mode="before")
    @classmethod
    def assemble_list(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            # Handle JSON string format
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return []
        return v

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def check_storage_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("local", "r2"):
            raise ValueError(f"Unknown storage backend '{v}', expected 'local' or 'r2'")
        return v

    def validate_runtime_config(self) -> None:
        if self.ENVIRONMENT.lower() == "production" and self.SECRET_KEY == DEFAULT_SECRET_KEY:
            raise RuntimeError("SECRET_KEY must be set in production.")


# Create settings instance
settings = Settings()

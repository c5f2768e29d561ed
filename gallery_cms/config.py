"""
Configuration management for the gallery CMS API.
Uses Pydantic Settings for environment variable management.
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_TITLE: str = "Gallery CMS API"
    API_VERSION: str = "0.1.0"
    API_DESCRIPTION: str = "Backend API for the art gallery site and its admin console"

    # CORS Configuration
    # Admin console and public site dev servers
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    # SQLite by default; postgresql+asyncpg:// URLs are also supported
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/gallery.db"

    # Image storage
    UPLOAD_DIR: str = "resources/galleries"
    THUMBNAIL_WIDTH: int = 400
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_IMAGE_TYPES: List[str] = [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
    ]

    # Admin account
    # Only this email may act as administrator (password or Google login)
    ADMIN_EMAIL: str = "admin@example.com"
    # Only read by the seed script when creating the admin user
    ADMIN_PASSWORD: str = "changeme123"

    # JWT Configuration
    # SECRET_KEY should be a long random string (e.g., generated with: openssl rand -hex 32)
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production-use-openssl-rand-hex-32"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    RESET_TOKEN_EXPIRE_MINUTES: int = 60

    # Google Sign-In (audience of the ID tokens sent by the admin console)
    GOOGLE_CLIENT_ID: str = ""

    # Rate limiting for auth endpoints
    RATE_LIMIT_ENABLED: bool = True
    AUTH_RATE_LIMIT: str = "10/15minutes"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Global settings instance
settings = Settings()

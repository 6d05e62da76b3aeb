"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a free connection
    DB_CONNECT_TIMEOUT: int = 10

    # Gemini API
    GEMINI_API_KEY: str
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_TIMEOUT: int = 60

    # Application
    APP_NAME: str = "AI Quiz Maker"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    PORT: int = 3001
    API_BASE_URL: str = "http://localhost:3001/api"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Quiz sessions
    SESSION_IDLE_TIMEOUT: int = 3600  # seconds

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings with type-safe configuration management."""

    # Database Configuration
    DATABASE_URL: str = "postgresql+asyncpg://postgres:postgres@db:5432/campushub"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    # Redis Configuration
    REDIS_URL: str = "redis://redis:6379/0"

    # Security Configuration
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # CORS Configuration
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://localhost:8000"

    # RSVP write path
    RSVP_LOCK_TIMEOUT_MS: int = 2000
    RSVP_MAX_RETRIES: int = 3
    RSVP_RETRY_BACKOFF_SECONDS: float = 0.05

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RSVP_RATE_LIMIT: str = "30/minute"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def allowed_origins_list(self) -> List[str]:
        """Convert comma-separated ALLOWED_ORIGINS string to list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


# Create a single instance to be imported throughout the app
settings = Settings()

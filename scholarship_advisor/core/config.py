"""Application configuration with environment variables."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Database
    DATABASE_URL: str = "sqlite:///./scholarship_advisor.db"
    
    # Session token settings
    SECRET_KEY: str = "dev-secret-change-me-in-production"
    ALGORITHM: str = "HS256"
    SESSION_EXPIRE_MINUTES: int = 8 * 60  # 8 hours
    SESSION_COOKIE_NAME: str = "session"
    COOKIE_SECURE: bool = False  # set to True behind HTTPS
    
    # Application
    APP_NAME: str = "Scholarship Advisor API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True
    
    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:8000",
        "http://127.0.0.1:8000",
        "http://localhost:5500",
        "http://127.0.0.1:5500",
    ]
    
    # JSON snapshot (users + student_details) imported into an empty database on startup
    LEGACY_DATA_FILE: Optional[str] = None
    
    class Config:
        env_file = ".env"
        case_sensitive = True


# Create global settings instance
settings = Settings()

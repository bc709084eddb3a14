"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    # Database
    DATABASE_URL: str
    
    # Redis
    REDIS_URL: str = "redis://redis:6379/0"
    CACHE_ENABLED: bool = True
    
    # Application
    APP_NAME: str = "LMS Progress & Assessment Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    
    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000
    TRUST_FORWARDED_HEADERS: bool = False  # only behind a proxy that sets X-Forwarded-For
    
    # Assessment Settings
    QUIZ_PASSING_PERCENTAGE: int = 70
    ASSIGNMENT_PASSING_PERCENTAGE: int = 50
    DEFAULT_ASSIGNMENT_MAX_SCORE: int = 100
    
    # Course structure cache
    COURSE_STRUCTURE_CACHE_TTL: int = 600  # 10 minutes
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()

"""
Configuration settings for the console
"""

import os
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Backend API
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8080")
    API_PROJECT_ID: str = os.getenv("API_PROJECT_ID", "1")
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "30"))

    # Session
    AUTH_TOKEN: Optional[str] = os.getenv("AUTH_TOKEN")
    SESSION_FILE: Optional[str] = os.getenv("SESSION_FILE")

    # Query cache
    QUERY_STALE_SECONDS: float = float(os.getenv("QUERY_STALE_SECONDS", "30"))
    QUERY_RETRY: int = int(os.getenv("QUERY_RETRY", "1"))
    MUTATION_RETRY: int = int(os.getenv("MUTATION_RETRY", "0"))
    QUERY_RETRY_DELAY: float = float(os.getenv("QUERY_RETRY_DELAY", "1.0"))
    QUERY_GC_SECONDS: float = float(os.getenv("QUERY_GC_SECONDS", "300"))
    QUERY_MAX_ENTRIES: int = int(os.getenv("QUERY_MAX_ENTRIES", "200"))

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # File limits
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

settings = Settings()

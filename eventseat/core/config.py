"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Storage: "memory", "file" or "sql"
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "memory")
    DATA_FILE: str = os.getenv("DATA_FILE", "data/events.json")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./eventseat.db")

    # Search
    SEARCH_FUZZY: bool = os.getenv("SEARCH_FUZZY", "true").lower() in ("1", "true", "yes")
    # What an empty or whitespace-only query returns: "all" guests or "none"
    SEARCH_EMPTY_QUERY: str = os.getenv("SEARCH_EMPTY_QUERY", "all")

    # Application
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # File limits
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB

    class Config:
        env_file = ".env"

settings = Settings()

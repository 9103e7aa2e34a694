"""
Configuration management for the Code Migration backend
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    database_url: str = ""
    storage_backend: str = "database"  # database, memory
    seed_demo_projects: bool = False  # memory backend only

    # Server
    backend_host: str = "0.0.0.0"
    backend_port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        extra="ignore",  # Ignore extra fields like VITE_* from .env
        env_file="../.env",
        env_file_encoding="utf-8"
    )

    # Environment
    python_env: str = "development"

    # CORS
    cors_origins: list = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    translation_temperature: float = 0.2
    translation_max_tokens: int = 4000
    analysis_temperature: float = 0.2
    summary_temperature: float = 0.3
    summary_sample_size: int = 3  # source files sent along with the project report request


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

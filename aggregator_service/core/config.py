from functools import lru_cache
from typing import Any, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings
import os
from dotenv import load_dotenv


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables."""

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Aggregator Service"
    DEBUG: bool = False

    # CORS settings
    BACKEND_CORS_ORIGINS: list[str] = ["*"]

    # Upstream endpoints
    CONTAINERS_URL_TEMPLATE: str = "https://games.roproxy.com/v2/users/{subject}/games?limit=50"
    ITEMS_URL_TEMPLATE: str = "https://games.roproxy.com/v1/games/{container_id}/game-passes?limit=50"
    DETAILS_URL_TEMPLATE: str = "https://economy.roproxy.com/v2/assets/{item_id}/details"

    # Upstream call settings
    UPSTREAM_TIMEOUT: float = 10.0  # seconds, per request
    MAX_PAGES: int = 1000
    CONTAINER_CONCURRENCY: int = 1
    DETAIL_CONCURRENCY: int = 8

    # Cache settings
    CACHE_TTL: int = 3600  # seconds
    SINGLE_FLIGHT: bool = True
    CACHE_PERSISTENCE: str = "none"  # none | file | redis
    CACHE_FILE_PATH: str = "cache.json"
    REDIS_URL: Optional[str] = None
    REDIS_CACHE_KEY: str = "aggregator:cache"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    ENABLE_STRUCTURED_LOGGING: bool = True

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    @field_validator("CACHE_PERSISTENCE")
    @classmethod
    def check_persistence(cls, v: str) -> str:
        """Only known persistence backends are accepted."""
        v = v.lower()
        if v not in ("none", "file", "redis"):
            raise ValueError(f"Unknown cache persistence backend: {v}")
        return v

    @field_validator("CONTAINER_CONCURRENCY", "DETAIL_CONCURRENCY", "MAX_PAGES")
    @classmethod
    def check_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


def load_env_file(env_file: str = ".env") -> None:
    """
    Load environment variables from specified .env file.

    Args:
        env_file: Path to the .env file. Defaults to ".env".
    """
    env_path = os.path.join(os.getcwd(), env_file)
    if os.path.exists(env_path):
        load_dotenv(env_path)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings with caching for efficiency.

    Returns:
        Settings: Application settings instance
    """
    return Settings()

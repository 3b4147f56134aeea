"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets and deployment paths come from environment variables or .env
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - Defaults work out-of-the-box with docker-compose; tests override
      DATABASE_URL in conftest before the first get_settings() call
    - login_path / root_path are settings so redirect targets are not hardcoded
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://grammable:grammable@db:5432/grammable"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Pictures
    upload_dir: str = "uploads"
    upload_url_prefix: str = "/uploads"

    # Sessions
    session_cookie_name: str = "session_token"
    session_duration_hours: int = 24
    session_cookie_secure: bool = False

    # Routing
    login_path: str = "/users/sign_in"
    root_path: str = "/"

    # Paging
    default_page_size: int = 20
    max_page_size: int = 100

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()

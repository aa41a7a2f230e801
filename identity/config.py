"""Application configuration, read from ``IDENTITY_*`` environment variables or a ``.env`` file."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the identity store."""

    model_config = SettingsConfigDict(env_prefix="IDENTITY_", env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite+aiosqlite:///./identity.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Plain postgresql:// URLs are served through the asyncpg driver."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Largest number of bind parameters sent in a single IN (...) clause.
    # Oracle caps IN lists at 1000 items, the lowest limit among common engines.
    max_bind_parameters: int = Field(default=1000, gt=0)

    # Observability
    log_level: str = "INFO"
    log_format: str = "text"


@lru_cache
def get_settings() -> Settings:
    return Settings()

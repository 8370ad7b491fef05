"""Configuration management for the application."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (backs the key-value store)
    database_url: str = Field(default="sqlite:///./supersuper.db")

    # Redis (Celery broker and result backend)
    redis_url: str = Field(default="redis://localhost:6379/0")

    # Pantry
    pantry_storage_key: str = Field(default="supersuper_pantry")
    search_similarity_threshold: float = Field(default=0.3, ge=0.0, le=1.0)

    # Background category classification after add/rename
    category_classification_enabled: bool = Field(default=False)

    # Experimental features
    semantic_search_enabled: bool = Field(default=False)

    # API
    environment: str = Field(default="development")

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production has a durable database."""
        if self.environment == "production" and self.database_url.startswith("sqlite"):
            raise ValueError("DATABASE_URL should not use sqlite in production")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

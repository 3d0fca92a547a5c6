"""
Configuration and settings for the tracker API.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

INSECURE_DEFAULT_SECRET = "your-secret-key"


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)
    log_level: str = Field(default="INFO")

    # Selects the CORS allow-list ("production" or anything else)
    node_env: str = Field(default="development")
    production_origins: list[str] = Field(
        default=["https://your-hostinger-domain.com", "http://localhost:3000"]
    )
    development_origin: str = Field(default="http://localhost:3000")

    # Tokens
    jwt_secret: str = Field(default=INSECURE_DEFAULT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    token_ttl_seconds: int = Field(default=3600, ge=1)

    # JSON document store (primary + backup for ephemeral hosts)
    database_path: str = Field(default="database.json")
    database_backup_path: str = Field(default="database-backup.json")

    # CRUD defaults
    default_page_size: int = Field(default=10, ge=1)
    validate_references: bool = Field(default=False)

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    def cors_origins(self) -> list[str]:
        if self.is_production:
            return list(self.production_origins)
        return [self.development_origin]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()

"""Application configuration using Pydantic Settings."""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # GitHub
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"
    github_access_token: Optional[str] = None
    github_organization: str = "unnamed"
    github_max_concurrency: int = 8  # simultaneous requests against the API
    http_timeout: float = 30.0

    # Maven metadata source used by the %%REPLACE_...%% macros
    nexus_url: str = "https://repo.unnamed.team"
    maven_repository: str = "maven-public"

    # Caching (seconds)
    project_cache_ttl: int = 60 * 15
    release_cache_ttl: int = 60 * 5

    # Public URL prefix of the rendered docs
    docs_url_prefix: str = "/docs"

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "*"

    log_level: str = "INFO"

    @field_validator("github_api_url", "github_raw_url", "nexus_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("docs_url_prefix", mode="after")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        return "/" + v.strip("/")

    def get_cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = ""


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

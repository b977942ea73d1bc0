"""
Configuration management for the battle rank stats builder.

Uses Pydantic settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables or a local .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Field names map to upper-case environment variables, e.g. GITHUB_REPO,
    OUTPUT_DIR, LEADERBOARD_MIN_GAMES.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Application Metadata
    # ==========================================================================
    app_name: str = "battle-rank-system"
    log_level: str = Field(default="INFO", description="Root log level")

    # ==========================================================================
    # Record Source (GitHub issues)
    # ==========================================================================
    github_api_url: str = "https://api.github.com"
    github_repo: str = Field(
        default="linxiap/battle-rank-system",
        description="owner/name of the repository whose issues carry match records",
    )
    github_token: Optional[str] = Field(
        default=None,
        description="Optional token; anonymous requests are used when unset",
    )
    github_issue_label: Optional[str] = Field(
        default=None,
        description="Only fetch issues carrying this label",
    )
    github_issue_state: Literal["open", "closed", "all"] = "all"
    github_per_page: int = Field(default=100, ge=1, le=100)
    github_max_pages: int = Field(default=50, ge=1)

    # ==========================================================================
    # HTTP
    # ==========================================================================
    http_timeout: float = Field(default=30.0, gt=0)
    http_max_retries: int = Field(default=1, ge=1, description="Attempts per request")
    requests_per_minute: int = Field(default=60, ge=1)

    # ==========================================================================
    # Output
    # ==========================================================================
    output_dir: Path = Path("data")
    leaderboard_min_games: int = Field(
        default=0,
        ge=0,
        description="Players with fewer overall games are left off the leaderboard",
    )

    @computed_field
    @property
    def github_headers(self) -> dict[str, str]:
        """Request headers for the GitHub API."""
        headers = {
            "User-Agent": self.app_name,
            "Accept": "application/vnd.github+json",
        }
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()

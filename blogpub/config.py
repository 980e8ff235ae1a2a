"""Centralized configuration using Pydantic BaseSettings"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Application configuration with environment variable support"""

    # Content and output locations
    content_dir: str = Field(
        default="./content", description="Directory holding the markdown posts (git checkout)"
    )
    output_dir: str = Field(
        default="./public", description="Directory the web server serves from"
    )
    source_suffix: str = Field(default=".md", description="Extension of source documents")
    output_suffix: str = Field(default=".html", description="Extension of converted artifacts")

    # Index page
    index_filename: str = Field(default="index.html", description="File name of the index page")
    index_heading: str = Field(default="Posts", description="Heading shown above the post table")

    # Conversion / publishing
    include_drafts: bool = Field(
        default=False, description="Publish documents marked 'draft: true' in front matter"
    )
    skip_unchanged: bool = Field(
        default=True, description="Leave outputs untouched when their content did not change"
    )
    manifest_filename: str = Field(
        default=".blogpub-manifest.json",
        description="Record of published artifacts used to delete stale ones (empty disables)",
    )

    # Change detection (git)
    sync_enabled: bool = Field(
        default=True, description="Check the git remote for new content before publishing"
    )
    git_remote: str = Field(default="origin", description="Remote to fetch new content from")
    git_branch: str = Field(
        default="", description="Remote branch to track (empty = upstream of current branch)"
    )
    git_timeout_seconds: int = Field(
        default=60, ge=5, le=600, description="Timeout for a single git command"
    )

    # Scheduling
    refresh_interval_minutes: int = Field(
        default=15, ge=1, le=1440, description="Interval between publish cycles in watch mode"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


# Global config instance
config = AppConfig()

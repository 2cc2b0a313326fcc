"""Application configuration using Pydantic settings."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database - SQLAlchemy (asyncpg)
    database_url: str = Field(
        ...,
        description="SQLAlchemy connection string (postgresql+asyncpg://...)",
    )

    # Database - Procrastinate (psycopg)
    procrastinate_database_url: str = Field(
        ...,
        description="Procrastinate connection string (postgresql://...)",
    )

    # Bitbucket Server
    bitbucket_base_url: str = Field(
        ...,
        description="Bitbucket Server base URL (https://bitbucket.example.com)",
    )
    bitbucket_token: str = Field(..., description="HTTP access token for the reviewer user")
    bitbucket_user_slug: str = Field(
        ...,
        description="Slug of the reviewer user (used for approve / needs work)",
    )
    bitbucket_webhook_secret: str | None = Field(
        None,
        description="Webhook secret for signature verification (unset = no check)",
    )

    # Workspace
    workspace_root: str = Field(
        ".",
        description="Directory holding the sources_<hash> working directories",
    )
    archive_name: str = Field("sourceFiles.zip", description="Downloaded archive file name")
    short_hash_length: int = Field(8, description="Commit hash prefix used as workspace key")

    # Linter
    swiftlint_path: str = Field("swiftlint", description="SwiftLint executable")

    # Jobs
    review_queue: str = Field("reviews", description="Procrastinate queue of review runs")
    worker_concurrency: int = Field(1, description="Review runs a worker executes at once")
    review_retry_attempts: int = Field(
        0,
        description="Procrastinate retries for a failed review run",
    )

    # Server
    host: str = Field("0.0.0.0")
    port: int = Field(8000)
    log_level: str = Field("INFO")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()

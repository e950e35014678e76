"""Application configuration using Pydantic Settings.

Reads configuration from environment variables with sensible defaults.
The store anon key and database password should come from the environment.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    environment: Literal["prod", "staging", "dev"] = Field(
        default="dev",
        description="Environment name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # =========================================================================
    # Store (hosted backend)
    # =========================================================================
    store_backend: Literal["rest", "sql"] = Field(
        default="rest",
        description="Which store implementation to use (REST API or direct SQL)",
    )
    store_url: str = Field(
        default="http://localhost:54321",
        description="Base URL of the hosted backend (REST API lives under /rest/v1)",
    )
    store_anon_key: str = Field(
        default="",
        description="Public anon key sent with every REST request",
    )
    store_access_token: str | None = Field(
        default=None,
        description="Signed-in session JWT supplied by the auth layer; anon key is used when unset",
    )
    store_timeout: float = Field(
        default=15.0,
        description="Store request timeout in seconds",
    )

    # =========================================================================
    # Database (only used when store_backend == "sql")
    # =========================================================================
    db_user: str = Field(
        default="postgres",
        description="Database user",
    )
    db_password: str = Field(
        default="",
        description="Database password",
    )
    db_name: str = Field(
        default="postgres",
        description="Database name",
    )
    db_host: str = Field(
        default="localhost",
        description="Database host",
    )
    db_port: int = Field(
        default=5432,
        description="Database port",
    )
    db_pool_size: int = Field(
        default=5,
        description="Database connection pool size",
    )
    db_pool_max_overflow: int = Field(
        default=10,
        description="Max overflow connections beyond pool size",
    )
    database_url_override: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL, takes precedence over the db_* fields",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Build the async SQLAlchemy database URL."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=True,
        description="Output logs as JSON outside of dev",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for convenience
settings = get_settings()

"""
Configuration management for datora-infra.

Environment-based configuration using Pydantic BaseSettings. All fields can be
overridden with ``DATORA_``-prefixed environment variables or a ``.env`` file
at the project root (point ``DATORA_ENV_FILE`` elsewhere to override).
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("DATORA_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are loaded with the DATORA_ prefix, e.g.
    DATORA_SEARCH_BASE_URL overrides ``search_base_url``. LOG_LEVEL is read
    without a prefix so it can be shared with the logging setup.
    """

    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )
    environment: Literal["dev", "staging", "prod"] = Field(
        default="dev", description="Deployment environment"
    )

    # SQL naming
    sql_database: str = Field(
        default="", description="Database name used to qualify SQL Server tables"
    )
    sql_table_prefix: str = Field(
        default="", description="Table prefix stripped when deriving default aliases"
    )

    # Outbound HTTP connection pool (keep-alive agent)
    http_max_sockets: int = Field(
        default=100, ge=1, description="Maximum concurrent sockets per host"
    )
    http_max_free_sockets: int = Field(
        default=10, ge=1, description="Host connection pools kept warm"
    )
    http_timeout: float = Field(
        default=60.0, gt=0, description="Active socket timeout in seconds"
    )
    http_free_socket_timeout: float = Field(
        default=30.0, gt=0, description="Idle socket timeout in seconds"
    )
    http_retry_max: int = Field(
        default=0, ge=0, le=10, description="Transport-level retries per request"
    )

    # Search index (Elasticsearch REST API)
    search_base_url: Optional[str] = Field(
        default=None, description="Search cluster base URL, e.g. http://localhost:9200"
    )
    search_username: Optional[str] = Field(default=None, description="Basic auth user")
    search_password: Optional[str] = Field(default=None, description="Basic auth password")
    search_timeout: float = Field(
        default=10.0, gt=0, description="Search request timeout in seconds"
    )

    # Audit mirroring
    audit_enabled: bool = Field(
        default=True, description="Mirror HTTP request/response pairs into the search index"
    )
    audit_event_index: str = Field(
        default="datora-event", description="Index holding correlation event documents"
    )
    audit_request_index: str = Field(
        default="datora-http-request", description="Index receiving audit documents"
    )

    @model_validator(mode="after")
    def validate_pool_bounds(self) -> "Settings":
        """Warm host pools cannot exceed the socket ceiling."""
        if self.http_max_free_sockets > self.http_max_sockets:
            raise ValueError(
                "http_max_free_sockets "
                f"({self.http_max_free_sockets}) must not exceed "
                f"http_max_sockets ({self.http_max_sockets})"
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="DATORA_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()

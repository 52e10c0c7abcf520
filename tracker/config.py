"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase Configuration
    supabase_url: str = Field(
        default="https://example.supabase.co",
        description="Base URL of the Supabase project"
    )
    supabase_anon_key: str = Field(
        default="",
        description="Anonymous (public) API key for the Supabase project"
    )
    supabase_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for Supabase REST calls"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for API calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Network Graph Parameters
    graph_base_size: float = Field(
        default=90.0,
        description="Node size for a region/department at exactly the sibling average target"
    )
    graph_min_size: float = Field(
        default=50.0,
        description="Smallest size a region/department node is drawn with"
    )
    graph_max_size: float = Field(
        default=160.0,
        description="Largest size a region/department node is drawn with"
    )
    graph_hub_label: str = Field(
        default="Mine de Soma",
        description="Label of the central hub node"
    )

    # Driver Roll-up
    unknown_driver_id: str = Field(
        default="unknown",
        description="Bucket id for deliveries without a driver"
    )
    unknown_driver_label: str = Field(
        default="Inconnu",
        description="Display name for deliveries without a driver name"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="MASAE Campaign Tracker",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()

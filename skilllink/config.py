"""
Application configuration using Pydantic Settings.
Loads environment variables and provides type-safe configuration.
"""

from typing import List, Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, validator
from pathlib import Path

# Get the base directory
BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:5173", "http://localhost:8080"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Current environment")
    debug: bool = Field(default=False, description="Debug mode")

    # API Configuration
    api_title: str = Field(default="SkillLink Africa API")
    api_version: str = Field(default="1.0.0")
    api_prefix: str = Field(default="/api/v1")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Supabase Configuration
    supabase_url: str = Field(default="https://example.supabase.co", description="Supabase project URL")
    supabase_anon_key: str = Field(default="temp-key", description="Supabase anonymous key")
    supabase_service_key: str = Field(default="temp-key", description="Supabase service role key")
    supabase_jwt_secret: str = Field(
        default="development-secret-key-change-in-production",
        description="Secret used by Supabase to sign access tokens"
    )

    # Database
    database_url: str = Field(default=f"sqlite:///{BASE_DIR / 'skilllink.db'}", description="SQLAlchemy database URL")

    # CORS
    cors_origins: str | List[str] = Field(default=",".join(DEFAULT_CORS_ORIGINS))
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(default=["*"])
    cors_allow_headers: List[str] = Field(default=["*"])

    # Pagination
    default_page_size: int = Field(default=20)
    max_page_size: int = Field(default=100)

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True)
    payment_rate_limit_requests: int = Field(default=10)
    payment_rate_limit_period: int = Field(default=60)  # seconds
    redis_url: Optional[str] = Field(default=None)

    # Sentry (Optional)
    sentry_dsn: Optional[str] = Field(default=None)
    sentry_traces_sample_rate: float = Field(default=0.1)

    # Email Configuration
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: int = Field(default=587)
    smtp_user: Optional[str] = Field(default=None)
    smtp_password: Optional[str] = Field(default=None)
    email_from_name: str = Field(default="SkillLink Africa")
    email_from_address: str = Field(default="noreply@skilllink.africa")
    admin_email: Optional[str] = Field(default=None, description="Fallback inbox for admin alerts")

    # Marketplace rules
    default_currency: str = Field(default="NGN")
    platform_fee_percent: int = Field(default=10, ge=0, le=100)
    dispute_escalation_hours: int = Field(default=48)
    milestone_reminder_hours: int = Field(default=24)
    min_payout_minor_units: int = Field(default=100)
    max_profile_skills: int = Field(default=30)
    featured_job_default_days: int = Field(default=7)
    job_alert_max_listed: int = Field(default=10, description="Jobs listed in one alert email")

    # Job aggregation
    adzuna_app_id: Optional[str] = Field(default=None)
    adzuna_app_key: Optional[str] = Field(default=None)
    adzuna_countries: str | List[str] = Field(default="gb,us,au")
    rapidapi_key: Optional[str] = Field(default=None)
    jsearch_queries: str | List[str] = Field(
        default="software developer remote,web developer,data analyst remote,designer remote"
    )
    job_source_timeout_seconds: int = Field(default=15)
    job_source_result_limit: int = Field(default=50)
    job_description_max_length: int = Field(default=5000)
    aggregated_job_duration_days: int = Field(default=30)

    # Payment provider
    flutterwave_secret_key: Optional[str] = Field(default=None)
    flutterwave_base_url: str = Field(default="https://api.flutterwave.com/v3")
    flutterwave_webhook_hash: Optional[str] = Field(default=None)
    payment_redirect_url: Optional[str] = Field(default=None)

    # Scheduled tasks
    cron_secret: Optional[str] = Field(default=None, description="Shared secret for scheduler calls")

    @validator("cors_origins", pre=True)
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            if not v or v.strip() == "":
                return list(DEFAULT_CORS_ORIGINS)
            return [origin.strip() for origin in v.split(",")]
        elif v is None:
            return list(DEFAULT_CORS_ORIGINS)
        return v

    @validator("adzuna_countries", "jsearch_queries", pre=True)
    def parse_comma_list(cls, v):
        """Parse comma-separated lists used by the job sources."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v or []

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment.lower() == "testing"

    @property
    def adzuna_enabled(self) -> bool:
        return bool(self.adzuna_app_id and self.adzuna_app_key)

    @property
    def jsearch_enabled(self) -> bool:
        return bool(self.rapidapi_key)

    @property
    def flutterwave_enabled(self) -> bool:
        return bool(self.flutterwave_secret_key)

    def validate_environment(self) -> None:
        """Validate that all required environment variables are set."""
        required_vars = [
            "supabase_url",
            "supabase_anon_key",
            "supabase_service_key",
            "supabase_jwt_secret",
            "flutterwave_webhook_hash",
            "cron_secret",
        ]

        missing_vars = []
        for var in required_vars:
            if not getattr(self, var, None):
                missing_vars.append(var.upper())

        if missing_vars:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to get settings throughout the application.
    """
    settings = Settings()

    # Validate environment in production
    if settings.is_production:
        settings.validate_environment()

    return settings


# Create a global settings instance
settings = get_settings()

"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

import re
from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="FreshAlert", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=5000, ge=1, le=65535, description="Server port")

    # Database settings
    database_url: str = Field(
        default="sqlite:///./freshalert.db",
        description="SQLAlchemy connection URL for the inventory and user store",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_init_attempts: int = Field(
        default=5, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # Messaging (Twilio) settings
    twilio_account_sid: Optional[str] = Field(
        default=None, description="Twilio account SID"
    )
    twilio_auth_token: Optional[str] = Field(
        default=None, description="Twilio auth token"
    )
    twilio_whatsapp_from: Optional[str] = Field(
        default=None, description="WhatsApp sender, e.g. whatsapp:+14155238886"
    )
    twilio_wa_template_sid: Optional[str] = Field(
        default=None, description="Pre-approved WhatsApp content template SID"
    )
    twilio_sms_from: Optional[str] = Field(
        default=None, description="SMS sender number"
    )

    # Scheduler settings
    scheduler_enabled: bool = Field(
        default=True, description="Start the recurring alert jobs on startup"
    )
    soon_job_time: str = Field(
        default="15:51", description="Daily HH:MM for the expiring-soon job"
    )
    soon_job_timezone: Optional[str] = Field(
        default=None,
        description="Timezone for the expiring-soon job (host timezone when unset)",
    )
    today_job_time: str = Field(
        default="15:50", description="Daily HH:MM for the expiring-today job"
    )
    today_job_timezone: str = Field(
        default="Asia/Kolkata", description="Timezone for the expiring-today job"
    )
    alert_timezone: str = Field(
        default="Asia/Kolkata",
        description="Timezone used to decide what 'today' is and to stamp alerts",
    )
    scheduler_poll_interval_sec: float = Field(
        default=1.0, gt=0, description="How often pending jobs are checked"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:5500",
            "http://127.0.0.1:5500",
            "http://localhost:5000",
        ],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=False, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_prefix: str = Field(default="", description="API route prefix")
    api_title: str = Field(
        default="FreshAlert API", description="API documentation title"
    )
    api_description: str = Field(
        default="Food expiry tracking with WhatsApp/SMS alerts",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("soon_job_time", "today_job_time")
    @classmethod
    def validate_job_time(cls, v: str) -> str:
        """Job times must be 24h HH:MM"""
        if not _HHMM_RE.match(v):
            raise ValueError(f"expected HH:MM, got {v!r}")
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    def messaging_configured(self) -> bool:
        """Twilio credentials are present (sender identities are checked per channel)"""
        return bool(self.twilio_account_sid and self.twilio_auth_token)


# Global settings instance
settings = Settings()

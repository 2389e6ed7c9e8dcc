"""
Centralized configuration for the Lumen backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings are namespaced (e.g., JWT_*, OPENAI_*, AI_*).
"""

from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "change-me-access-secret"
DEFAULT_JWT_REFRESH_SECRET = "change-me-refresh-secret"

# Placeholder shipped in .env.example; treated as "no key configured"
OPENAI_PLACEHOLDER_KEY = "sk-your-openai-api-key"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Lumen API"
    app_version: str = "0.1.0"
    environment: Literal["development", "test", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:8081", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Persistence
    database_backend: Literal["memory", "supabase"] = "memory"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # JWT
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_refresh_secret: str = DEFAULT_JWT_REFRESH_SECRET
    jwt_algorithm: str = "HS256"
    jwt_access_ttl_days: int = 7
    jwt_refresh_ttl_days: int = 30

    # Password hashing
    bcrypt_rounds: int = 12

    # Session lists
    max_refresh_tokens: int = 5
    max_device_tokens: int = 5

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4"
    openai_max_tokens: int = 2048
    openai_temperature: float = 0.7
    openai_timeout_seconds: float = 60.0

    # AI usage limits (requests per window)
    ai_daily_limit_free: int = 10
    ai_daily_limit_premium: int = 100
    ai_monthly_limit_free: int = 100
    ai_monthly_limit_premium: int = 3000
    usage_reset_timezone: str = "UTC"

    # Chat pipeline
    max_message_length: int = 10_000
    history_window: int = 10

    # Request rate limiting (per worker, fixed windows)
    rate_limit_enabled: bool = True
    ai_rate_limit_requests: int = 10
    ai_rate_limit_window: int = 60  # seconds
    auth_rate_limit_requests: int = 10
    auth_rate_limit_window: int = 900  # seconds; failed attempts only

    # Feature Flags
    enable_analytics: bool = True

    @model_validator(mode="after")
    def check_production_secrets(self) -> "Settings":
        """Refuse to start in production with the shipped JWT secrets."""
        if self.environment == "production":
            if self.jwt_secret == DEFAULT_JWT_SECRET:
                raise ValueError("JWT_SECRET must be set in production")
            if self.jwt_refresh_secret == DEFAULT_JWT_REFRESH_SECRET:
                raise ValueError("JWT_REFRESH_SECRET must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def openai_configured(self) -> bool:
        """Whether a usable OpenAI credential is present."""
        key = self.openai_api_key.strip()
        return bool(key) and key != OPENAI_PLACEHOLDER_KEY


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()

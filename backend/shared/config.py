"""
Centralized configuration for the HouseHelp backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings are namespaced (e.g., JWT_*, SUPABASE_*, RESEND_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "HouseHelp API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Session tokens
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7
    session_cookie_name: str = "hh-token"
    admin_session_cookie_name: str = "hh-admin-token"
    bcrypt_rounds: int = 10

    # Admin allow-list
    admin_email: str = ""
    admin_email_domain: str = "@househelp.rw"

    # Rate limiting
    rate_limit_requests: int = 100
    rate_limit_window: int = 60  # seconds
    rate_limit_max_entries: int = 10000
    login_rate_limit_requests: int = 10
    otp_rate_limit_requests: int = 10

    # OTP verification lockout
    otp_max_failed_attempts: int = 5
    otp_lockout_seconds: int = 15 * 60

    # CSRF
    csrf_token_max_age: int = 24 * 60 * 60  # seconds

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Email delivery
    email_provider: str = "resend"  # "resend" or "log"
    resend_api_key: str = ""
    company_email: str = "noreply@househelp.rw"

    # Identity store: "supabase" or "memory" (local development only)
    data_backend: str = "supabase"

    # Frontend URL (for verification links)
    app_url: str = "http://localhost:3000"

    def require_jwt_secret(self) -> str:
        """
        Return the signing secret, failing hard if it is not configured.

        There is no fallback secret.
        """
        if not self.jwt_secret:
            raise ConfigurationError(
                "JWT_SECRET environment variable must be set. "
                "Generate one with: openssl rand -hex 32",
                details={"setting": "JWT_SECRET"},
            )
        return self.jwt_secret


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()

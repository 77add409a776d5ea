"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match current behavior

Collaborators:
  - api/main.py: reads settings for CORS, pool and startup validation
  - identity/auth_users.py: JWT secret and token TTL
  - container.py: decides in-memory vs PostgreSQL repositories

Constraints:
  - Lives in API/infrastructure layer, NOT in domain/application
  - No business logic — pure configuration

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache for performance
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_TEST_ENVS = {"test", "testing", "ci"}
_SEED_ENVS = {"local", "test", "testing", "ci"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string
        app_env: Application environment (development/local/test/production)
        allowed_origins: Comma-separated CORS origins
        max_body_bytes: Max request body size (default: 1MB)
        metrics_require_auth: Require an Admin token for /metrics (default: False)
        cors_allow_credentials: Allow cookies cross-origin (default: False)
        jwt_secret: Secret for signing JWT access tokens
        jwt_access_ttl_minutes: Access token TTL in minutes (default: 7 days)
        password_min_length: Minimum plaintext password length (default: 6)
        log_level: Root log level for the service logger
        log_json: Emit JSON log lines (default: True)
        dev_seed_users: Seed the demo Admin/Manager/User accounts at startup
        dev_seed_password: Password shared by the seeded accounts
        dev_seed_force_reset: Wipe every user before seeding
    """

    # Required (no defaults)
    database_url: str

    # Environment
    app_env: str = "development"

    # CORS configuration
    allowed_origins: str = "http://localhost:3000"

    # Security - Hardening
    max_body_bytes: int = 1024 * 1024  # 1MB
    metrics_require_auth: bool = False
    cors_allow_credentials: bool = False

    # Security - JWT Auth
    jwt_secret: str = "dev-secret"
    jwt_access_ttl_minutes: int = 7 * 24 * 60

    # Users
    password_min_length: int = 6

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Database - Connection Pool
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Dev Tools (Backend Safe)
    dev_seed_users: bool = False
    dev_seed_password: str = "admin123"
    dev_seed_force_reset: bool = False

    @field_validator("jwt_access_ttl_minutes")
    @classmethod
    def ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("jwt_access_ttl_minutes must be greater than 0")
        return v

    @field_validator("password_min_length")
    @classmethod
    def password_min_length_valid(cls, v: int) -> int:
        if v < 1:
            raise ValueError("password_min_length must be >= 1")
        return v

    @field_validator("db_pool_max_size")
    @classmethod
    def pool_max_size_valid(cls, v: int) -> int:
        if v < 1:
            raise ValueError("db_pool_max_size must be >= 1")
        return v

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        insecure_secrets = {"dev-secret", "changeme", "change-me", "password"}
        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in insecure_secrets:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")
        if not self.metrics_require_auth:
            raise ValueError("METRICS_REQUIRE_AUTH must be true in production")
        if self.dev_seed_users:
            raise ValueError("DEV_SEED_USERS must be false in production")

        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def is_test_env(self) -> bool:
        return self.app_env.strip().lower() in _TEST_ENVS

    def allows_dev_seed(self) -> bool:
        return self.app_env.strip().lower() in _SEED_ENVS

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()

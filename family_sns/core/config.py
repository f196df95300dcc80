"""Application configuration with environment variables."""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "change-this-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment (dev | test | prod)
    ENV: str = "dev"

    VERSION: str = "1.0.0"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./family_sns.db"
    DB_AUTO_MIGRATE: bool = False  # opt-in: upgrade to head on startup
    DB_POOL_TIMEOUT: int = 10  # seconds to wait for a pooled connection
    DB_STATEMENT_TIMEOUT_MS: int = 15000  # PostgreSQL only

    # Access token (supports key rotation)
    JWT_SECRET: str = DEV_JWT_SECRET
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    JWT_EXPIRES_HOURS: int = 24 * 7

    # Password policy
    PASSWORD_MIN_LENGTH: int = 6

    # CORS (also used for WebSocket origin checks outside dev)
    CORS_ORIGINS: str = "http://localhost:3000"

    # Image uploads (served from /uploads)
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute, 0 disables)
    RATE_LIMIT_AUTH: int = 10

    @model_validator(mode="after")
    def _require_real_secret(self) -> "Settings":
        if self.ENV not in ("dev", "test") and self.JWT_SECRET == DEV_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set outside dev/test")
        return self

    @property
    def is_dev(self) -> bool:
        return self.ENV == "dev"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets


settings = Settings()

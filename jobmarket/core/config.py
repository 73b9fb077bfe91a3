"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.

The settings object is built once at process entry (see jobmarket.main.create_app)
and handed to the database, token codec and password hasher. Business code
never reads the environment directly.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from jobmarket.core.logging import get_logger

logger = get_logger(__name__)

# Minimum signing secret length in bytes (HS256 key size)
MIN_SECRET_LENGTH = 32

# Used only outside production when JWT_SECRET_KEY is unset
DEV_JWT_SECRET = "dev-secret-key-change-in-production-min-32-chars"


class ConfigurationError(RuntimeError):
    """Raised at startup when configuration is unusable."""


class Settings(BaseSettings):
    environment: str = "development"

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "jobmarket_user"
    postgres_password: str = "password"
    postgres_db: str = "jobmarket_db"

    # Full SQLAlchemy URL, overrides the postgres_* fields when set
    database_url: Optional[str] = None

    # Bound for connect, pool checkout and statement execution
    db_timeout_seconds: float = 5.0

    # JWT Auth
    jwt_secret_key: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7

    # Password hashing
    password_hash_rounds: int = 12

    # App
    cors_origins: str = "*"
    log_level: str = "INFO"
    debug: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sqlalchemy_url(self) -> str:
        return self.database_url or self.postgres_url

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


def resolve_jwt_secret(settings: Settings) -> str:
    """
    Return the signing secret, failing fast on unsafe configuration.

    - production without a secret: ConfigurationError
    - any environment with a secret shorter than 32 bytes: ConfigurationError
    - non-production without a secret: development fallback plus a warning
    """
    secret = settings.jwt_secret_key
    if not secret:
        if settings.is_production:
            raise ConfigurationError(
                "JWT_SECRET_KEY environment variable is required in production. "
                "Set a strong secret of at least 32 characters "
                "(for example: openssl rand -base64 32)."
            )
        logger.warning(
            "JWT_SECRET_KEY not set. Using the development-only secret. "
            "This is INSECURE and must never reach production."
        )
        return DEV_JWT_SECRET

    if len(secret.encode("utf-8")) < MIN_SECRET_LENGTH:
        raise ConfigurationError(
            f"JWT_SECRET_KEY must be at least {MIN_SECRET_LENGTH} bytes long "
            f"(current length: {len(secret.encode('utf-8'))})."
        )
    return secret


@lru_cache()
def get_settings() -> Settings:
    return Settings()

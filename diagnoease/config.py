from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List
import os


class Settings(BaseSettings):
    """Global app settings loaded from environment.
    - Keep defaults light for dev.
    - Override via .env or real env vars.
    """

    APP_NAME: str = "diagnoease_api"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True

    MONGODB_URI: str = "mongodb://localhost:27017/"
    # Used when the URI carries no database path
    MONGODB_DB_NAME: str = "DiagnoEaseDB"
    # Multi-document transactions need a replica set; off for standalone servers
    MONGODB_TRANSACTIONS: bool = False

    # JWT settings
    JWT_SECRET: str = "diagnoease_dev_secret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 365

    # Raw CORS string from env (comma-separated); parsed via cors_origins property
    CORS_ORIGINS: str | None = None

    RATE_LIMIT_ENABLED: bool = True
    TOKEN_RATE_LIMIT: str = "30/minute"

    # Stripe
    STRIPE_SECRET_KEY: str | None = None
    PAYMENT_CURRENCY: str = "usd"

    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def cors_origins(self) -> List[str]:
        """Return CORS origins as a list, parsing comma-separated env string."""
        raw = self.CORS_ORIGINS or os.getenv("CORS_ORIGINS", "") or ""
        return [o.strip() for o in raw.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() in ("prod", "production")


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()

"""Environment-driven application settings."""

import os
from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class Settings(BaseModel):
    """Runtime configuration resolved from environment variables."""
    environment: str = Field(default="development", description="development, test or production")
    port: int = 3000

    database_url: Optional[str] = Field(None, description="Full SQLAlchemy URL, overrides DB_* parts")
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "terrasale_db"
    db_charset: str = "utf8mb4"
    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_pool_timeout: float = Field(10.0, description="Seconds to wait for a pooled connection")

    slack_webhook_url: str = ""
    slack_channel: str = "#terrasale-notifications"
    slack_username: str = "TerraSale Bot"
    slack_timeout_seconds: float = 5.0

    jwt_secret: str = ""
    jwt_expires_hours: int = 24
    bcrypt_rounds: int = 12

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment."""
        env = os.environ
        return cls(
            environment=env.get("ENVIRONMENT", env.get("NODE_ENV", "development")).lower(),
            port=int(env.get("PORT", "3000")),
            database_url=env.get("DATABASE_URL") or None,
            db_host=env.get("DB_HOST", "localhost"),
            db_port=int(env.get("DB_PORT", "3306")),
            db_user=env.get("DB_USER", "root"),
            db_password=env.get("DB_PASSWORD", ""),
            db_name=env.get("DB_NAME", "terrasale_db"),
            db_charset=env.get("DB_CHARSET", "utf8mb4"),
            db_pool_size=int(env.get("DB_POOL_SIZE", "10")),
            db_max_overflow=int(env.get("DB_MAX_OVERFLOW", "5")),
            db_pool_timeout=float(env.get("DB_POOL_TIMEOUT", "10")),
            slack_webhook_url=env.get("SLACK_WEBHOOK_URL", "").strip(),
            slack_channel=env.get("SLACK_CHANNEL", "#terrasale-notifications"),
            slack_username=env.get("SLACK_USERNAME", "TerraSale Bot"),
            slack_timeout_seconds=float(env.get("SLACK_TIMEOUT_SECONDS", "5")),
            jwt_secret=env.get("JWT_SECRET", "").strip(),
            jwt_expires_hours=int(env.get("JWT_EXPIRES_HOURS", "24")),
            bcrypt_rounds=int(env.get("BCRYPT_ROUNDS", "12")),
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def sqlalchemy_url(self) -> str:
        """Database URL for SQLAlchemy, MySQL via PyMySQL unless DATABASE_URL is set."""
        if self.database_url:
            return self.database_url
        return (
            f"mysql+pymysql://{quote_plus(self.db_user)}:{quote_plus(self.db_password)}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}?charset={self.db_charset}"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings instance (call get_settings.cache_clear() after env changes)."""
    return Settings.from_env()

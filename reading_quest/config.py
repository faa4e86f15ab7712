"""Configuration management for the Reading Quest API."""
from typing import Any, Dict
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEVELOPMENT_DB = {
    "dbname": "reading_quest",
    "user": "postgres",
    "password": "postgres",
    "host": "localhost",
    "port": 5432,
}


class Settings(BaseSettings):
    """Application settings, read from environment variables of the same name."""

    app_name: str = "Reading Quest API"
    debug: bool = False

    # DATABASE_URL (Heroku style) wins over the individual DB_* values
    database_url: str = ""
    db_name: str = ""
    db_user: str = ""
    db_password: str = ""
    db_host: str = "localhost"
    db_port: int = 5432

    cache_enabled: bool = True
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_plans: int = Field(default=0, ge=0, description="0 keeps published plans cached forever")

    secret_key: str = "your-secret-key-change-this-in-production-use-openssl-rand-hex-32"
    auth_cookie_name: str = "reading_quest_auth"

    default_streak_minimum: int = Field(default=3, ge=1)
    max_streak_minimum: int = Field(default=50, ge=1)
    default_timezone: str = "UTC"

    allowed_origins_csv: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        alias="ALLOWED_ORIGINS",
    )

    model_config = SettingsConfigDict(
        env_file=None,  # Don't load from .env file
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("default_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as err:
            raise ValueError(f"Unknown timezone '{value}'") from err
        return value

    @model_validator(mode="after")
    def _default_within_maximum(self) -> "Settings":
        if self.default_streak_minimum > self.max_streak_minimum:
            raise ValueError("default_streak_minimum cannot exceed max_streak_minimum")
        return self

    @computed_field
    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins_csv.split(",") if origin.strip()]

    @property
    def db_config(self) -> Dict[str, Any]:
        """psycopg2 connection keywords."""
        if self.database_url.strip():
            parsed = urlparse(self.database_url)
            return {
                "dbname": parsed.path.lstrip("/"),
                "user": parsed.username,
                "password": parsed.password,
                "host": parsed.hostname,
                "port": parsed.port or 5432,
            }
        if self.db_name.strip() and self.db_user.strip():
            return {
                "dbname": self.db_name,
                "user": self.db_user,
                "password": self.db_password,
                "host": self.db_host,
                "port": self.db_port,
            }
        return dict(DEVELOPMENT_DB)


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()

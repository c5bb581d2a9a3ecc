import json
import re
from datetime import timedelta
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str) -> timedelta:
    """Parse ``"24h"``, ``"15m"``, ``"30s"``, ``"7d"`` or a plain number of seconds."""
    match = DURATION_PATTERN.match(str(value))
    if not match:
        raise ValueError(f"invalid duration expression: {value!r}")
    amount, unit = match.groups()
    duration = timedelta(**{DURATION_UNITS[unit]: int(amount)})
    if duration <= timedelta(0):
        raise ValueError("duration must be positive")
    return duration


class Settings(BaseSettings):
    app_name: str = "Todo API"
    environment: str = "development"
    database_url: str = "sqlite:///./todos.db"
    jwt_secret: str = Field(default="dev-secret-do-not-use-in-production-32chars", min_length=32)
    jwt_algorithm: str = "HS256"
    access_token_expires_in: str = "24h"
    refresh_token_expire_days: int = Field(default=30, gt=0)
    refresh_token_rotation: bool = False
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    redis_url: str = "redis://localhost:6379/0"
    login_rate_limit: int = Field(default=5, ge=0)
    login_rate_window_seconds: int = Field(default=300, gt=0)
    cors_origins: List[str] = ["http://localhost:5173"]
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(default=3001, gt=0, lt=65536)
    shutdown_timeout_seconds: int = Field(default=10, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_parse_json=False,
    )

    @field_validator("access_token_expires_in")
    def validate_access_token_ttl(cls, value: str) -> str:
        parse_duration(value)
        return value

    @field_validator("cors_origins", mode="before")
    def parse_cors_origins(cls, value: object) -> List[str]:
        if value is None:
            return []
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            cleaned = value.strip()
            if cleaned == "":
                return []
            if cleaned.startswith("["):
                return json.loads(cleaned)
            return [item.strip() for item in cleaned.split(",") if item.strip()]
        return [str(value)]

    @property
    def access_token_ttl(self) -> timedelta:
        return parse_duration(self.access_token_expires_in)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(days=self.refresh_token_expire_days)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in {"dev", "development"}


settings = Settings()

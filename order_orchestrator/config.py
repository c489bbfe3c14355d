"""Runtime configuration loaded from environment variables."""
import logging
import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, field_validator

DEFAULT_REQUEST_TIMEOUT_MS = 5000
DEFAULT_PORT = 3003

REQUIRED_KEYS = ("CUSTOMERS_API_BASE", "ORDERS_API_BASE", "SERVICE_TOKEN", "JWT_SECRET")


class Settings(BaseModel):
    CUSTOMERS_API_BASE: Optional[str] = None
    ORDERS_API_BASE: Optional[str] = None
    SERVICE_TOKEN: Optional[str] = None
    JWT_SECRET: Optional[str] = None
    REQUEST_TIMEOUT_MS: int = DEFAULT_REQUEST_TIMEOUT_MS
    PORT: int = DEFAULT_PORT
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _known_log_level(cls, value):
        return _log_level(value)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            CUSTOMERS_API_BASE=_base_url(os.getenv("CUSTOMERS_API_BASE")),
            ORDERS_API_BASE=_base_url(os.getenv("ORDERS_API_BASE")),
            SERVICE_TOKEN=os.getenv("SERVICE_TOKEN"),
            JWT_SECRET=os.getenv("JWT_SECRET"),
            REQUEST_TIMEOUT_MS=_positive_int(os.getenv("REQUEST_TIMEOUT_MS"), DEFAULT_REQUEST_TIMEOUT_MS),
            PORT=_positive_int(os.getenv("PORT"), DEFAULT_PORT),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )

    def missing(self) -> List[str]:
        """Names of required keys that are unset or blank. Values are never returned."""
        return [key for key in REQUIRED_KEYS if not (getattr(self, key) or "").strip()]

    @property
    def timeout_sec(self) -> float:
        return self.REQUEST_TIMEOUT_MS / 1000.0


def _base_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip().rstrip("/")


def _positive_int(raw: Optional[str], default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value > 0 else default


def _log_level(raw: Optional[str]) -> str:
    level = str(raw or "INFO").strip().upper()
    return level if isinstance(logging.getLevelName(level), int) else "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()

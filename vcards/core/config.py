"""
Configuration helpers for the V-Cards backend.

Routers and services read settings through ``get_settings()`` instead of
touching ``os.environ`` directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import quote_plus
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    database_url: str
    db_pool_size: int
    jwt_secret: str
    jwt_algorithm: str
    user_token_ttl_seconds: int
    admin_token_ttl_seconds: int
    otp_ttl_seconds: int
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    slug_max_attempts: int
    log_level: str


def _database_url_from_parts() -> str:
    host = os.getenv("DB_HOST", "").strip()
    name = os.getenv("DB_NAME", "").strip()
    if not (host and name):
        return ""
    user = quote_plus(os.getenv("DB_USER", ""))
    password = quote_plus(os.getenv("DB_PASS", ""))
    port = os.getenv("DB_PORT", "").strip()
    auth = f"{user}:{password}@" if password else (f"{user}@" if user else "")
    netloc = f"{host}:{port}" if port else host
    return f"mysql+pymysql://{auth}{netloc}/{name}?charset=utf8mb4"


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        database_url=(os.getenv("DATABASE_URL") or "").strip() or _database_url_from_parts(),
        db_pool_size=_int(os.getenv("DB_POOL_SIZE", "10"), 10),
        jwt_secret=os.getenv("JWT_SECRET", ""),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        user_token_ttl_seconds=_int(os.getenv("USER_TOKEN_TTL_SECONDS", "604800"), 604800),
        admin_token_ttl_seconds=_int(os.getenv("ADMIN_TOKEN_TTL_SECONDS", "86400"), 86400),
        otp_ttl_seconds=_int(os.getenv("OTP_TTL_SECONDS", "300"), 300),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        slug_max_attempts=max(1, _int(os.getenv("SLUG_MAX_ATTEMPTS", "5"), 5)),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )

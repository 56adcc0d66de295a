"""
Configuration helpers for the Hemo account API.

Settings are read from environment variables once and cached, so that
routers/services never fetch os.environ directly. Tests call
``get_settings.cache_clear()`` after changing the environment.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

# Signing key used when JWT_SECRET is unset outside production.
DEV_JWT_SECRET = "dev-secret-change-me"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    database_url: str
    jwt_secret: str
    jwt_algorithm: str
    access_token_expire_minutes: int
    mail_backend: str
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    smtp_timeout_seconds: int
    verify_email_subject: str
    cors_origins: tuple[str, ...]
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _list(value: str | None) -> tuple[str, ...]:
        if not value:
            return ()
        return tuple(item.strip().rstrip("/") for item in value.split(",") if item.strip())

    app_env = (os.getenv("APP_ENV") or "dev").lower()
    jwt_secret = (os.getenv("JWT_SECRET") or "").strip()
    if app_env == "prod" and jwt_secret in ("", DEV_JWT_SECRET):
        raise RuntimeError("JWT_SECRET must be configured when APP_ENV=prod.")
    jwt_secret = jwt_secret or DEV_JWT_SECRET
    default_backend = "smtp" if app_env == "prod" else "console"
    return Settings(
        app_env=app_env,
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./hemo.db"),
        jwt_secret=jwt_secret,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        access_token_expire_minutes=_int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"), 1440),
        mail_backend=(os.getenv("MAIL_BACKEND") or default_backend).lower(),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        smtp_timeout_seconds=_int(os.getenv("SMTP_TIMEOUT_SECONDS", "10"), 10),
        verify_email_subject=os.getenv("VERIFY_EMAIL_SUBJECT", "Email verification Hemo"),
        cors_origins=_list(os.getenv("CORS_ORIGINS")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )

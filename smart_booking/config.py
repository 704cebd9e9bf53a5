"""
Runtime settings, read once from the environment.

Environment variables (all optional unless noted):
    ANTHROPIC_API_KEY    - Anthropic/Claude API key (required by scripts/run.py)
    MODEL_ID             - Claude model identifier
    DB_PATH              - SQLite database path (default: data/smart_booking.db)
    DEFAULT_DAILY_LIMIT  - AI chat calls per user per day (default: 100)
    MAIL_CHANNEL         - "smtp" or "console" (default: console)
    EMAIL_SMTP_HOST, EMAIL_SMTP_PORT, EMAIL_USER, EMAIL_PASSWORD
    CORS_ORIGINS         - comma-separated origins allowed in production
    APP_ENV              - "development" or "production"
    PORT                 - HTTP port (default: 3001)
    LOG_LEVEL            - logging level name (default: INFO)
"""

import os
from dataclasses import dataclass
from typing import Mapping

APP_NAME = "Smart Booking Pro"
APP_VERSION = "1.2.0"
DEFAULT_MODEL = "claude-haiku-4-5-20251001"

_DEV_ORIGINS = ("http://localhost:3000", "http://localhost:5173", "http://localhost:4173")


@dataclass(frozen=True)
class Settings:
    anthropic_api_key: str | None = None
    model_id: str = DEFAULT_MODEL
    db_path: str = "data/smart_booking.db"
    default_daily_limit: int = 100
    mail_channel: str = "console"
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    email_user: str | None = None
    email_password: str | None = None
    sender_name: str = APP_NAME
    cors_origins: tuple[str, ...] = _DEV_ORIGINS
    app_env: str = "development"
    port: int = 3001
    log_level: str = "INFO"

    @property
    def support_address(self) -> str:
        return self.email_user or "support@smartbookingpro.com"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        app_env = env.get("APP_ENV", "development")

        if app_env == "production":
            origins = tuple(
                o.strip() for o in env.get("CORS_ORIGINS", "").split(",") if o.strip()
            )
        else:
            origins = _DEV_ORIGINS

        return cls(
            anthropic_api_key=env.get("ANTHROPIC_API_KEY") or None,
            model_id=env.get("MODEL_ID", DEFAULT_MODEL),
            db_path=env.get("DB_PATH", "data/smart_booking.db"),
            default_daily_limit=int(env.get("DEFAULT_DAILY_LIMIT", "100")),
            mail_channel=env.get("MAIL_CHANNEL", "console"),
            smtp_host=env.get("EMAIL_SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(env.get("EMAIL_SMTP_PORT", "587")),
            email_user=env.get("EMAIL_USER") or None,
            email_password=env.get("EMAIL_PASSWORD") or None,
            cors_origins=origins,
            app_env=app_env,
            port=int(env.get("PORT", "3001")),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

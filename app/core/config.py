from __future__ import annotations

import os
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "SalonPro"
    ENV: str = "dev"
    DATABASE_URL: str | None = None
    REDIS_URL: str | None = None
    REDIS_SSL_CERT_REQS: str | None = "required"
    REDIS_SSL_CA_CERTS: str | None = None
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"
    SENTRY_DSN: str | None = None

    # Shared secret for the admin trigger / ledger endpoints (X-Admin-Key header)
    ADMIN_API_KEY: str = "change_me_admin"

    # Twilio - SMS and WhatsApp delivery
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_PHONE_NUMBER: str | None = None  # SMS sender identity
    TWILIO_WHATSAPP_NUMBER: str | None = None  # WhatsApp sender identity, without the "whatsapp:" prefix
    TWILIO_API_BASE_URL: str = "https://api.twilio.com"
    GATEWAY_TIMEOUT_SECONDS: float = 10.0

    # Occasion reminders
    REMINDER_WINDOW_DAYS: int = 7
    REMINDER_RUN_HOUR: int = 9
    REMINDER_RUN_MINUTE: int = 0
    REMINDER_TIMEZONE: str = "UTC"
    REMINDER_TENANT_WORKERS: int = 4
    REMINDER_SEND_INTERVAL_SECONDS: float = 0.0
    REMINDER_DEDUP_ENABLED: bool = True
    REMINDER_LOCK_TTL_SECONDS: int = 3600

    @field_validator("TWILIO_PHONE_NUMBER", "TWILIO_WHATSAPP_NUMBER", mode="before")
    @classmethod
    def coerce_sender_to_str(cls, v):
        """Phone numbers given as bare digits in env files arrive as ints."""
        if v is None:
            return v
        return str(v).strip()

    @field_validator("REMINDER_WINDOW_DAYS")
    @classmethod
    def window_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("REMINDER_WINDOW_DAYS must be >= 0")
        return v

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        # Convert Heroku's postgres:// URL to postgresql://
        if self.DATABASE_URL and self.DATABASE_URL.startswith("postgres://"):
            self.DATABASE_URL = self.DATABASE_URL.replace("postgres://", "postgresql://", 1)

        required_in_prod = (
            "DATABASE_URL",
            "ADMIN_API_KEY",
            "TWILIO_ACCOUNT_SID",
            "TWILIO_AUTH_TOKEN",
        )
        if self.ENV.lower() == "prod":
            missing = [name for name in required_in_prod if not getattr(self, name)]
            if missing:
                raise ValueError(f"Missing required production settings: {', '.join(missing)}")
            if self.ADMIN_API_KEY == "change_me_admin":
                raise ValueError("Insecure default secrets in production: ADMIN_API_KEY uses default placeholder")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"
    DATABASE_URL: str = "sqlite:///./storage/dev.db"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    DATABASE_URL: str = "sqlite:///./storage/test.db"
    ADMIN_API_KEY: str = "test-admin-key"
    TWILIO_ACCOUNT_SID: str = "ACtest"
    TWILIO_AUTH_TOKEN: str = "test-token"
    TWILIO_PHONE_NUMBER: str = "+15550000001"
    TWILIO_WHATSAPP_NUMBER: str = "+15550000002"
    REMINDER_TENANT_WORKERS: int = 1


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()

"""Service configuration and collaborator factories."""

from functools import lru_cache
from typing import Literal, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from notifications.channels import (
    DEFAULT_FROM_ADDRESS,
    ConsoleEmailSender,
    EmailSender,
    ResendEmailSender,
)
from notifications.dispatcher import NotificationDispatcher
from notifications.templates import DEFAULT_TEMPLATE_CONFIG, TemplateConfig


DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "https://bethesda-mini-library.onrender.com",
)


class Settings(BaseSettings):
    """Settings read from environment variables (and .env) at startup."""

    resend_api_key: Optional[str] = Field(default=None, description="Resend API key.")
    resend_from: str = Field(default=DEFAULT_FROM_ADDRESS, description="From address for all email.")
    admin_email: Optional[str] = Field(
        default=None,
        description="Mailbox for admin copies of reservations and waitlist entries.",
    )

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4000, ge=1, le=65535)

    email_backend: Literal["resend", "console"] = Field(
        default="resend",
        description="'console' logs emails instead of sending them.",
    )
    log_level: str = Field(default="INFO")

    cors_origins: Union[str, list[str]] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("admin_email", "resend_api_key")
    @classmethod
    def blank_as_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value):
        """Parse CORS origins from a comma-separated string or a list."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return list(DEFAULT_CORS_ORIGINS)
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""
    return Settings()


def build_email_sender(settings: Settings) -> EmailSender:
    """Create the sender selected by EMAIL_BACKEND."""
    if settings.email_backend == "console":
        return ConsoleEmailSender(from_address=settings.resend_from)
    return ResendEmailSender(api_key=settings.resend_api_key, from_address=settings.resend_from)


def build_dispatcher(
    settings: Settings,
    template_config: TemplateConfig = DEFAULT_TEMPLATE_CONFIG,
) -> NotificationDispatcher:
    """Wire a dispatcher from settings."""
    return NotificationDispatcher(
        sender=build_email_sender(settings),
        template_config=template_config,
        admin_email=settings.admin_email,
    )

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from event_approval.models.enums import NotificationChannel


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Event Approval"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000
    data_mode: Literal["memory", "database"] = "memory"
    database_url: str = "postgresql+asyncpg://event_approval:event_approval@db:5432/event_approval"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]
    notification_channel: NotificationChannel = NotificationChannel.IN_APP
    request_number_prefix: str = "EA-"
    request_number_start: int = 1000
    retention_days: int | None = None
    seed_demo_data: bool = True


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

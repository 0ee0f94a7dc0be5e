from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "HR Vacations"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "sqlite+aiosqlite:///./hr_vacations.db"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Yearly allotment given to a balance row when it is first created.
    default_allotment_days: int = 25
    # Re-check remaining days inside the approval transaction. When off, a
    # request that passed the submit-time check is always settled, even if an
    # earlier approval has since consumed the balance.
    enforce_balance_on_approval: bool = True


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

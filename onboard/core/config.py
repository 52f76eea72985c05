
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Vendor Onboarding API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (SQLite for local dev, any async SQLAlchemy URL in production)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./onboard_dev.db",
        alias="DATABASE_URL",
    )

    # Multi-tenancy default
    default_client_id: str = Field(default="default", alias="DEFAULT_CLIENT_ID")

    # Write-request audit trail
    audit_enabled: bool = Field(default=True, alias="AUDIT_ENABLED")

    # Follow-up listing windows (days after today)
    followup_week_days: int = Field(default=7, alias="FOLLOWUP_WEEK_DAYS")
    followup_month_days: int = Field(default=30, alias="FOLLOWUP_MONTH_DAYS")

    # Admin payment list page size
    payments_page_limit: int = Field(default=50, alias="PAYMENTS_PAGE_LIMIT")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

settings = Settings()

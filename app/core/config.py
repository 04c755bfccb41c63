from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Car Insurance API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./car_insurance.db",
        alias="DATABASE_URL",
    )
    create_schema_on_startup: bool = Field(
        default=True, alias="CREATE_SCHEMA_ON_STARTUP",
    )  # use `alembic upgrade head` instead when False
    seed_demo_data: bool = Field(default=True, alias="SEED_DEMO_DATA")

    # Policy expiration monitor
    expiration_monitor_enabled: bool = Field(
        default=True, alias="EXPIRATION_MONITOR_ENABLED",
    )
    expiration_check_interval_minutes: float = Field(
        default=30, gt=0, alias="EXPIRATION_CHECK_INTERVAL_MINUTES",
    )
    expiration_window_hours: float = Field(
        default=24, gt=0, alias="EXPIRATION_WINDOW_HOURS",
    )  # only expirations younger than this are recorded

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def expiration_check_interval_seconds(self) -> float:
        return self.expiration_check_interval_minutes * 60

settings = Settings()

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "leasecast"
    log_level: str = "INFO"

    database_url: str = "sqlite+pysqlite:///./leasecast.db"

    forecast_horizon_months: int = 6
    history_window_months: int = 12
    # Rent only covers part of a month's billing; utilities and services add roughly 30%.
    baseline_uplift_factor: Decimal = Decimal("1.3")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()

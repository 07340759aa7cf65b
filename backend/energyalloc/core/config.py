from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from energyalloc.models.enums import AutoSplitStrategy


class Settings(BaseSettings):
    app_name: str = "Captive Allocation API"
    api_prefix: str = "/api/v1"
    debug: bool = False
    auto_create_schema: bool = True

    database_url: str = "sqlite+pysqlite:///" + str(
        Path(__file__).resolve().parents[2] / "storage" / "energyalloc.db"
    )
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    rate_limit_requests: int = 120
    rate_limit_window_seconds: int = 60

    allocation_store_key: str = "allocationPercentages"
    allocation_tolerance: Decimal = Decimal("0.01")
    auto_split_strategy: AutoSplitStrategy = AutoSplitStrategy.legacy
    auxiliary_consumption_rate: Decimal = Decimal("0.05")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()

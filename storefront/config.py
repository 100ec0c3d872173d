from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from pathlib import Path
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    ENV: str = "development"
    DATA_DIR: Path = Path("data")  # cart documents live under DATA_DIR / CARTS_DIR
    CARTS_DIR: str = "carts"

    # external catalog / inventory / job backend
    BACKEND_API_URL: str = "http://localhost:3001/api"
    BACKEND_TIMEOUT_SECONDS: float = 10.0

    # where cart clients push their snapshots
    CART_API_URL: str = "http://localhost:3000/api/cart"

    CORS_ORIGINS: str = "http://localhost:3000"  # comma separated

    # inventory monitor
    LOW_STOCK_THRESHOLD: int = 10
    CHANNEL_SYNC_STALE_MINUTES: int = 5
    CHANNEL_SYNC_OUTDATED_MINUTES: int = 30
    INVENTORY_UNIT_VALUE: float = 25.0  # assumed average price per available unit

    # job stats
    JOB_RERUN_MINUTES: int = 6
    NOTIFICATION_TTL_SECONDS: int = 5

    # background polling (disabled unless explicitly turned on)
    ENABLE_POLLING: bool = False
    INVENTORY_POLL_SECONDS: float = 30.0
    JOB_STATS_POLL_SECONDS: float = 30.0
    JOB_CHECK_SECONDS: float = 10.0

    # checkout
    CHECKOUT_SHIPPING_FLAT: float = 9.99
    CHECKOUT_TAX_RATE: float = 0.08

    PRODUCTS_PAGE_SIZE: int = 12

    # Example .env:
    # DATA_DIR=./data
    # BACKEND_API_URL=http://inventory.internal:3001/api

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def carts_path(self) -> Path:
        return Path(self.DATA_DIR) / self.CARTS_DIR

    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()

settings = get_settings()

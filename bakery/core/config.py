# bakery/core/config.py

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str
    ALGORITHM: Literal["HS256", "HS512"] = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Database
    DATABASE_URL: str
    DATABASE_ECHO: bool = False

    # Frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    RATE_LIMIT_ENABLED: bool = True

    # Costing fallbacks, used when the settings table has no value
    DEFAULT_LABOR_COST_PER_HOUR: Decimal = Decimal("25")
    DEFAULT_OVERHEAD_PERCENTAGE: Decimal = Decimal("15")
    DEFAULT_PRODUCTION_TIME_HOURS: Decimal = Decimal("2")

    # "allow" lets stock go below zero (back-orders), "reject" refuses the movement
    NEGATIVE_STOCK_POLICY: Literal["allow", "reject"] = "allow"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
    )


settings = Settings()

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    SQL_ECHO: bool = False

    ENVIRONMENT: str = "development"
    LOG_LEVEL: Optional[str] = None

    TAX_RATE: Decimal = Decimal("0.05")
    CART_TTL_HOURS: int = 24
    ORDER_NUMBER_MAX_RETRIES: int = 5

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 50

    class Config:
        env_file = ".env"

settings = Settings()

from decimal import Decimal
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./settleup.db"
    DATABASE_ECHO: bool = False
    BALANCE_TOLERANCE: Decimal = Decimal("0.01")
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "SETTLEUP_"

settings = Settings()

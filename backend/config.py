# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./inventory_ledger.db"

    # Current-user resolution (JWT issued by the external auth service)
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Prefix of unit codes generated when a receipt carries fewer codes than units
    UNIT_CODE_PREFIX: str = "AUTO-"

    # Transaction bounds in seconds: wait for row locks / total execution
    TX_MAX_WAIT_SECONDS: float = 5.0
    TX_TIMEOUT_SECONDS: float = 10.0
    BATCH_TX_MAX_WAIT_SECONDS: float = 10.0
    BATCH_TX_TIMEOUT_SECONDS: float = 30.0

    DEFAULT_PAGE_SIZE: int = 20

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()

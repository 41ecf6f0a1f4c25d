"""Application settings loaded from the environment (and ``.env``)."""
from __future__ import annotations
from pathlib import Path
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    DATA_DIR: Path = Path("data")
    DATABASE_URL: str | None = None

    # Logging
    LOG_LEVEL: str = "INFO"

    # Matching thresholds (0-100 similarity scores)
    MATCH_MIN_CONFIDENCE: int = 80
    EMPLOYEE_MATCH_MIN_CONFIDENCE: int = 70
    DUPLICATE_JOB_MIN_CONFIDENCE: int = 85
    MATCH_REVIEW_THRESHOLD: int = 95

    # Fixed duration credited per QC / delivery-drop shift
    SPECIAL_SHIFT_HOURS: float = 3.0

    # Overrun alerts
    OVERRUN_ALERT_WEBHOOK_URL: SecretStr | None = None
    ALERT_TIMEOUT_SECONDS: float = 10.0

    @property
    def data_dir(self) -> Path:
        return self.DATA_DIR

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"sqlite:///{self.DATA_DIR / 'crewhours.db'}"


settings = Settings()

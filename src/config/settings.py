import os
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

# Project base directory (repo root)
BASE_DIR = Path(__file__).resolve().parents[2]

# Where the terminal clock keeps its display preferences
DATA_DIR = os.getenv("TIMESYNC_DATA_DIR", str(BASE_DIR / ".data"))


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # API Settings
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "*")

    # Probe Settings
    PROBE_TIMEOUT_SECONDS: float = float(os.getenv("PROBE_TIMEOUT_SECONDS", "5.0"))

    # Display Settings
    TICK_INTERVAL_MS: int = int(os.getenv("TICK_INTERVAL_MS", "100"))
    PREFERENCES_PATH: str = os.getenv(
        "PREFERENCES_PATH", str(Path(DATA_DIR) / "preferences.json")
    )

    # Logging Settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_PATH: Optional[str] = os.getenv("LOG_PATH")

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]


# Global settings instance
settings = Settings()

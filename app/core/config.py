from pathlib import Path
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root

ENV_FILE = os.getenv("ENV_FILE", str(BASE_DIR / ".env"))

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    APP_ENV: str = "local"
    DATABASE_URL: str = "sqlite+pysqlite:///./cart.db"
    CORS_ORIGINS: str = "*"  # Comma-separated list of allowed origins, or "*" for all

    CATALOG_SERVER_URL: str = "http://localhost:3002/v1"
    CATALOG_TIMEOUT_SECONDS: float = 5.0
    AUTH_SERVER_URL: str = "http://localhost:3000/v1"

    ARTICLE_VALIDATION_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list, handling '*' for development"""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

settings = Settings()

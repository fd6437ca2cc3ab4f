from typing import Optional
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Basic configuration ---
    APP_NAME: str = "Data Access Layer"
    APP_ENV: str = "development"  # development, production, testing
    DEBUG: bool = True

    # --- Database (SQLModel over SQLAlchemy) ---
    DB_DRIVER: str = "mysql+aiomysql"
    DB_SYNC_DRIVER: str = "mysql+pymysql"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "root"
    DB_NAME: str = "app_db"
    DB_ECHO: bool = False

    def _build_url(self, driver: str) -> str:
        safe_password = quote_plus(self.DB_PASSWORD)
        return f"{driver}://{self.DB_USER}:{safe_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def DATABASE_URL(self) -> str:
        # Async connection URL, used by AsyncSession-backed repositories
        return self._build_url(self.DB_DRIVER)

    @property
    def SYNC_DATABASE_URL(self) -> str:
        return self._build_url(self.DB_SYNC_DRIVER)

    # --- Paging ---
    DEFAULT_PAGE_SIZE: int = 20

    # --- Logging ---
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"
    LOG_FILE_RETENTION: Optional[str] = "30 days"

    # --- Pydantic ---
    # Load env from project root .env; priority: env vars > .env > defaults
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )


# Singleton settings instance
settings = Settings()

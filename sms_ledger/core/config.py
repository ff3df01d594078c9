from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PROJECT
    PROJECT_NAME: str = "SMS Ledger API"
    VERSION: str = "1.0.0"

    # STORAGE
    # "sql" (SQLAlchemy, SQLite by default) or "memory" (process-local, dev/tests)
    LEDGER_BACKEND: str = "sql"
    DATABASE_URL: str = "sqlite:///./sms_ledger.db"

    # LEDGER POLICIES
    # "today" is computed in this zone, never in the host locale
    LEDGER_TIMEZONE: str = "Asia/Dhaka"
    # 0 = unbounded
    RECENT_TRANSACTIONS_LIMIT: int = 50
    BACKUP_RETENTION: int = 100
    # A blank/unparseable amount normalizes to 0; keep zero matching off unless asked for
    ALLOW_ZERO_AMOUNT_MATCH: bool = False

    # PAYLOAD BOUNDS
    MAX_FIELD_LENGTH: int = 255
    MAX_MESSAGE_LENGTH: int = 4000

    # ADMIN
    ADMIN_RESET_KEY: str = "change-me"

    # LOGGING
    LOG_LEVEL: str = "INFO"

    # CORS
    # The mobile client and the dashboard both call the API directly
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    @property
    def database_url(self) -> str:
        # Hosted PostgreSQL still hands out the legacy scheme
        if self.DATABASE_URL.startswith("postgres://"):
            return self.DATABASE_URL.replace("postgres://", "postgresql://", 1)
        return self.DATABASE_URL


settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "memory"  # "memory" | "json"
    BOOKING_DATA_DIR: str = "./data/bookings"
    STORE_LOCK_TIMEOUT_SECONDS: float = 5.0

    NOTIFIER_WEBHOOK_URL: str | None = None
    NOTIFIER_TIMEOUT_SECONDS: float = 10.0

    BOOKING_LIST_MAX_LIMIT: int = 100


settings = Settings()

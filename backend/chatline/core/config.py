from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "chatline"
    app_env: str = "development"

    database_url: str = "sqlite:///./chatline.db"

    log_level: str = "INFO"

    # Expiry sweeps
    scheduler_enabled: bool = True
    message_retention_days: int = 10
    message_sweep_interval_seconds: float = 24 * 60 * 60
    status_sweep_interval_seconds: float = 60 * 60

    # Message history paging
    default_history_limit: int = 50
    max_history_limit: int = 200

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()

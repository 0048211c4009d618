import logging

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Score record store
    store_backend: str = "json"  # "memory" | "json" | "firebase"
    store_path: str = "data/judging.json"
    firebase_url: str = ""
    firebase_auth: str = ""
    http_timeout_seconds: float = 10.0

    # Auto-save
    save_max_attempts: int = 3
    save_backoff_seconds: float = 0.2
    autosave_interval_seconds: float = 2.0

    # Setup validation
    min_alternates: int = 2
    max_alternates: int = 3

    log_level: str = "INFO"

    model_config = {"env_prefix": "JUDGING_", "env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for entry points (API handler, scripts)."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

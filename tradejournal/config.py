"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'tradejournal.db'}"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]  # Vite dev server

    # Sizing
    default_target_position_size: float = 10000.0  # Used until a preference row exists

    # Statistics
    stats_max_trades: int = 1000  # Hard cap on trades fetched per stats request

    model_config = {"env_prefix": "TJ_", "env_file": ".env"}


settings = Settings()

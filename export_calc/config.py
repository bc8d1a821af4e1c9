"""Configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Export-Calculator"
    debug: bool = False
    log_level: str = "INFO"

    default_market: str = "dubai"
    default_language: str = "tr"

    # Simulated processing latency before a session calculation runs
    calculation_delay_ms: int = 500

    cors_origins: list[str] = ["*"]

    model_config = {
        "env_prefix": "EXPORT_CALC_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()

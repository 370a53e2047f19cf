import logging

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Recursion bound for nested hydration and serialization
    max_depth: int = Field(64, ge=1)
    log_level: str = "WARNING"

    model_config = {
        "env_prefix": "HYDRATION_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()


def configure_logging() -> None:
    """Apply settings.log_level to the engine loggers."""
    logging.getLogger("services").setLevel(settings.log_level.upper())

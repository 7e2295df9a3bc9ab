import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent
TEMPLATES_DIR = BASE_DIR / "templates"


class Settings(BaseSettings):
    """Service settings, read from NIX_SCRIPTS_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_prefix="NIX_SCRIPTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    site_url: str = Field(
        default="https://scripts.aloshy.ai",
        description="Public URL of this service, shown in the usage line",
    )
    raw_base_url: str = Field(
        default="https://raw.githubusercontent.com/aloshy-ai/scripts/main",
        description="Base URL the generated wrapper downloads scripts from",
    )
    connectivity_check_url: str = Field(
        default="https://raw.githubusercontent.com",
        description="URL probed by the wrapper before starting nix-shell",
    )
    registry_file: Path | None = Field(
        default=None,
        description="JSON registry; when unset the scripts/ package is scanned",
    )
    index_max_age: int = Field(default=3600, ge=0)
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("site_url", "raw_base_url", "connectivity_check_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def setup_logging(settings: Settings) -> None:
    logger = logging.getLogger("app")
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(settings.log_format, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False

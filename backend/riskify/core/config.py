from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised backend configuration with type validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://127.0.0.1:5173"]
    )

    # External renderer (tier 1). Unset means the tier is skipped as unavailable.
    external_renderer_url: str | None = Field(default=None)
    external_renderer_timeout: float = Field(default=10.0, gt=0, le=120)

    # Headless browser renderer (tier 2)
    browser_render_timeout: float = Field(default=45.0, gt=0, le=600)
    browser_executable_path: str | None = Field(default=None)
    browser_launch_args: list[str] = Field(
        default=[
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-gpu",
            "--no-first-run",
            "--no-zygote",
        ]
    )

    # Primitive renderer (tier 3)
    primitive_render_timeout: float = Field(default=30.0, gt=0, le=600)

    # Risk scoring
    scoring_seed: int | None = Field(default=None)

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """Cached singleton so .env is not reloaded on every request."""
    return Settings()


settings = get_settings()

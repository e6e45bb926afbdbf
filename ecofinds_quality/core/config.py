"""
Central configuration loaded from environment variables.
All settings have sensible defaults so the service works out of the box
with no manual configuration.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ecofinds_quality.schemas.blur import BlurConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ------------------------------------------------------------------ #
    # Service identity
    # ------------------------------------------------------------------ #
    app_name: str = "ecofinds-image-quality"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"

    # ------------------------------------------------------------------ #
    # API authentication
    # Set API_KEY to a non-empty string to enable authentication.
    # Leave blank (default) to run in open / unauthenticated mode.
    # ------------------------------------------------------------------ #
    api_key: str = ""

    # ------------------------------------------------------------------ #
    # Rate limiting  (requires slowapi, enabled by default)
    # Set RATE_LIMIT_ENABLED=false to disable entirely.
    # ------------------------------------------------------------------ #
    rate_limit_enabled: bool = True
    rate_limit_per_minute: int = 120       # requests per client IP per minute

    # ------------------------------------------------------------------ #
    # Blur detection
    # ------------------------------------------------------------------ #
    blur_threshold: float = Field(default=100.0, gt=0)
    min_image_size: int = 100              # advisory, px
    max_image_size: int = 4000             # advisory, px
    # JSON list in the environment, e.g. SUPPORTED_FORMATS='["jpeg","png"]'
    supported_formats: list[str] = ["jpeg", "jpg", "png", "webp"]
    decode_timeout_seconds: float = 20.0

    # ------------------------------------------------------------------ #
    # Image fetching
    # ------------------------------------------------------------------ #
    max_image_fetch_timeout_seconds: int = 15
    max_image_size_bytes: int = 30 * 1024 * 1024   # 30 MB

    # ------------------------------------------------------------------ #
    # Batch limits
    # ------------------------------------------------------------------ #
    max_batch_size: int = 20
    batch_concurrency: int = Field(default=4, ge=1)

    # ------------------------------------------------------------------ #
    # Logging
    # ------------------------------------------------------------------ #
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = True          # structured JSON logs in production

    # ------------------------------------------------------------------ #
    # Derived helpers
    # ------------------------------------------------------------------ #
    @field_validator("api_key", mode="before")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip() if v else ""

    @property
    def auth_enabled(self) -> bool:
        return bool(self.api_key)

    def blur_config(self, threshold: float | None = None) -> BlurConfig:
        """
        Build the immutable analyzer configuration.
        `threshold` overrides BLUR_THRESHOLD for a single request.
        """
        return BlurConfig(
            threshold=self.blur_threshold if threshold is None else threshold,
            min_image_size=self.min_image_size,
            max_image_size=self.max_image_size,
            supported_formats=tuple(self.supported_formats),
            decode_timeout_seconds=self.decode_timeout_seconds,
            fetch_timeout_seconds=self.max_image_fetch_timeout_seconds,
            max_image_size_bytes=self.max_image_size_bytes,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return a cached Settings singleton.
    The cache is reset between tests via `get_settings.cache_clear()`.
    """
    return Settings()


from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.services.error_classifier import OperationContext
from src.services.retry import RetryPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Phrase Lens API"
    app_env: Literal["development", "production", "test"] = "development"
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-3-pro-preview"
    gemini_timeout: float = 60.0

    api_key: str | None = None
    chrome_extension_id: str | None = None

    rate_limit_max_requests: int = Field(default=50, ge=1)
    rate_limit_window_seconds: int = Field(default=3600, ge=1)
    max_image_size: int = Field(default=5 * 1024 * 1024, ge=1)

    cache_max_entries: int = Field(default=1000, ge=1)
    cache_ttl_seconds: int = Field(default=3600, ge=1)
    cache_update_recency_on_get: bool = True

    retry_max_retries: int = Field(default=3, ge=0)
    retry_initial_delay: float = Field(default=1.0, ge=0)
    retry_max_delay: float = Field(default=32.0, ge=0)
    retry_backoff_multiplier: float = Field(default=2.0, ge=1)
    identify_max_retries: int | None = Field(default=None, ge=0)

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    def retry_policy(self, operation: OperationContext | str) -> RetryPolicy:
        max_retries = self.retry_max_retries
        if OperationContext(operation) != OperationContext.ANALYZE and self.identify_max_retries is not None:
            max_retries = self.identify_max_retries
        return RetryPolicy(
            max_retries=max_retries,
            initial_delay=self.retry_initial_delay,
            max_delay=self.retry_max_delay,
            backoff_multiplier=self.retry_backoff_multiplier,
        )

    def secrets(self) -> list[str]:
        return [value for value in (self.gemini_api_key, self.api_key) if value]


@lru_cache
def get_settings() -> Settings:
    return Settings()

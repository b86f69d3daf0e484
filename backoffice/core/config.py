from __future__ import annotations

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

_MEGABYTE = 1024 * 1024


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    media_api_base_url: str = Field(
        default="http://localhost:3000",
        validation_alias="MEDIA_API_BASE_URL",
    )
    business_api_base_url: str = Field(
        default="http://localhost:3000",
        validation_alias="BUSINESS_API_BASE_URL",
    )
    api_token: str = Field(default="", validation_alias="API_TOKEN")

    upload_max_file_size_bytes: int = Field(
        default=50 * _MEGABYTE,
        validation_alias="UPLOAD_MAX_FILE_SIZE_BYTES",
    )
    upload_max_batch_size_bytes: int = Field(
        default=100 * _MEGABYTE,
        validation_alias="UPLOAD_MAX_BATCH_SIZE_BYTES",
    )
    upload_max_files: int = Field(default=0, validation_alias="UPLOAD_MAX_FILES")
    upload_max_in_flight: int = Field(default=1, validation_alias="UPLOAD_MAX_IN_FLIGHT")
    upload_request_timeout_seconds: float = Field(
        default=60.0,
        validation_alias="UPLOAD_REQUEST_TIMEOUT_SECONDS",
    )

    frontend_origins: str = Field(
        default="http://localhost:5173",
        validation_alias="FRONTEND_ORIGINS",
    )

    @computed_field
    @property
    def frontend_origin_list(self) -> list[str]:
        return [item.strip() for item in self.frontend_origins.split(",") if item.strip()]

    @computed_field
    @property
    def auth_headers(self) -> dict[str, str]:
        if not self.api_token:
            return {}
        return {"Authorization": f"Bearer {self.api_token}"}


@lru_cache
def get_settings() -> Settings:
    return Settings()

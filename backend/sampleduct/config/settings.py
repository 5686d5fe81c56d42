from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel, Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class SourceSettings(BaseModel):
    kind: Literal["refocus", "static"] = "refocus"
    base_url: str | None = None
    token: str | None = None
    timeout_seconds: float = 10.0
    # Only read by static sources: metric name -> raw value.
    samples: Dict[str, str] = Field(default_factory=dict)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SAMPLEDUCT_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "SAMPLEDUCT_REDIS_URL"),
    )
    extract_queue_name: str = Field(
        default="extract",
        validation_alias=AliasChoices("EXTRACT_QUEUE_NAME", "SAMPLEDUCT_EXTRACT_QUEUE_NAME"),
    )
    extract_job_timeout_seconds: int = 300
    extract_result_ttl_seconds: int = 3600
    cache_key_prefix: str = "sampleduct"
    meter_name: str = "Refocus"
    log_level: str = "INFO"

    sources: Dict[str, SourceSettings] = Field(default_factory=dict)


settings = Settings()

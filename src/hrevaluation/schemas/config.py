"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

DEFAULT_COMPLETION_URL = "https://llm.api.cloud.yandex.net/foundationModels/v1/completion"


class LLMConfig(BaseModel):
    api_key: str = ""
    folder_id: str = ""
    endpoint: str = DEFAULT_COMPLETION_URL
    model: str = "yandexgpt/latest"
    temperature: float = 0.2
    max_tokens: int = 20_000
    call_timeout: float = Field(default=15.0, gt=0)
    attempts: int = Field(default=5, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///hr_evaluation.db"
    echo: bool = False


class StorageConfig(BaseModel):
    bucket: str = "resumes"
    endpoint_url: str | None = None
    region: str | None = None
    access_key: str | None = None
    secret_key: str | None = None
    link_ttl: int = Field(default=20 * 60, gt=0)


class ExtractionConfig(BaseModel):
    backend: Literal["tika", "pdf"] = "tika"
    tika_url: str = "http://localhost:9998"
    timeout: float = Field(default=60.0, gt=0)
    exclude_patterns: list[str] = Field(default_factory=list)


class AppConfig(BaseModel):
    llm: LLMConfig = Field(default_factory=LLMConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)

    def to_settings(self) -> dict[str, Any]:
        return self.model_dump()


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)

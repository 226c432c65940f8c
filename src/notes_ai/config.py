from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    openrouter_api_key: str = Field(default="", alias="OPENROUTER_API_KEY")
    openrouter_api_url: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        alias="OPENROUTER_API_URL",
    )
    llm_default_model: str = Field(default="openai/gpt-5-nano", alias="LLM_DEFAULT_MODEL")
    llm_timeout_ms: int = Field(default=60000, alias="LLM_TIMEOUT_MS")
    llm_retry_attempts: int = Field(default=2, alias="LLM_RETRY_ATTEMPTS")
    llm_retry_delay_ms: int = Field(default=1000, alias="LLM_RETRY_DELAY_MS")

    app_url: str = Field(default="", alias="APP_URL")
    app_name: str = Field(default="", alias="APP_NAME")

    telemetry_url: str = Field(default="", alias="SUPABASE_URL")
    telemetry_api_key: str = Field(default="", alias="SUPABASE_SERVICE_ROLE_KEY")
    telemetry_table: str = Field(default="llm_generations", alias="TELEMETRY_TABLE")

    def model_post_init(self, __context: Any) -> None:  # type: ignore[override]
        self.openrouter_api_key = self.openrouter_api_key.strip()
        self.llm_default_model = self.llm_default_model.strip() or "openai/gpt-5-nano"
        self.llm_timeout_ms = max(self.llm_timeout_ms, 1)
        self.llm_retry_attempts = max(self.llm_retry_attempts, 0)
        self.llm_retry_delay_ms = max(self.llm_retry_delay_ms, 0)
        self.app_url = self.app_url.strip()
        self.app_name = self.app_name.strip()
        self.telemetry_url = self.telemetry_url.strip().rstrip("/")
        self.telemetry_table = self.telemetry_table.strip() or "llm_generations"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

from notes_ai.config import Settings


def test_defaults() -> None:
    settings = Settings(OPENROUTER_API_KEY="k")
    assert settings.llm_timeout_ms == 60000
    assert settings.llm_retry_attempts == 2
    assert settings.llm_retry_delay_ms == 1000
    assert settings.llm_default_model == "openai/gpt-5-nano"
    assert settings.openrouter_api_url == "https://openrouter.ai/api/v1/chat/completions"


def test_env_aliases(monkeypatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "  env-key  ")
    monkeypatch.setenv("LLM_RETRY_ATTEMPTS", "4")
    monkeypatch.setenv("LLM_DEFAULT_MODEL", "x-ai/grok-4-fast")
    settings = Settings()
    assert settings.openrouter_api_key == "env-key"
    assert settings.llm_retry_attempts == 4
    assert settings.llm_default_model == "x-ai/grok-4-fast"


def test_normalization_clamps_bad_values() -> None:
    settings = Settings(
        LLM_RETRY_ATTEMPTS=-1,
        LLM_RETRY_DELAY_MS=-5,
        LLM_TIMEOUT_MS=0,
        LLM_DEFAULT_MODEL="  ",
        SUPABASE_URL="https://p.supabase.co/",
    )
    assert settings.llm_retry_attempts == 0
    assert settings.llm_retry_delay_ms == 0
    assert settings.llm_timeout_ms == 1
    assert settings.llm_default_model == "openai/gpt-5-nano"
    assert settings.telemetry_url == "https://p.supabase.co"

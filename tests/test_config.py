import pytest

from folio_assistant.config import (
    DEFAULT_LLM_MODEL,
    AssistantConfig,
    llm_timeout_ms,
    news_fetch_timeout_ms,
)


class TestTimeouts:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ASSISTANT_LLM_TIMEOUT_MS", raising=False)
        monkeypatch.delenv("ASSISTANT_NEWS_FETCH_TIMEOUT_MS", raising=False)
        assert llm_timeout_ms() == 1500
        assert news_fetch_timeout_ms() == 2200

    def test_valid_override(self, monkeypatch):
        monkeypatch.setenv("ASSISTANT_LLM_TIMEOUT_MS", " 2500 ")
        assert llm_timeout_ms() == 2500

    @pytest.mark.parametrize("raw", ["abc", "0", "-20", "1.5", ""])
    def test_invalid_values_use_default(self, monkeypatch, raw):
        monkeypatch.setenv("ASSISTANT_LLM_TIMEOUT_MS", raw)
        assert llm_timeout_ms() == 1500


class TestAssistantConfig:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ASSISTANT_LLM_MODEL", "claude-test")
        monkeypatch.setenv("ASSISTANT_LLM_TIMEOUT_MS", "900")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")

        config = AssistantConfig.from_env()

        assert config.llm_model == "claude-test"
        assert config.llm_timeout_ms == 900
        assert config.anthropic_api_key == "sk-test"
        assert config.redis_url == "redis://cache:6379/2"

    def test_from_env_defaults(self, monkeypatch):
        for name in (
            "ASSISTANT_LLM_MODEL",
            "ASSISTANT_LLM_TIMEOUT_MS",
            "ANTHROPIC_API_KEY",
            "REDIS_URL",
        ):
            monkeypatch.delenv(name, raising=False)

        config = AssistantConfig.from_env()

        assert config.llm_model == DEFAULT_LLM_MODEL
        assert config.anthropic_api_key == ""
        assert config.news_max_symbols == 2
        assert config.symbol_cache_size == 1000

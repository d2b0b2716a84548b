import logging
import os

from pydantic import BaseModel

logger = logging.getLogger(__name__)

LLM_TIMEOUT_ENV = "ASSISTANT_LLM_TIMEOUT_MS"
NEWS_FETCH_TIMEOUT_ENV = "ASSISTANT_NEWS_FETCH_TIMEOUT_MS"
LLM_MODEL_ENV = "ASSISTANT_LLM_MODEL"

DEFAULT_LLM_TIMEOUT_MS = 1_500
DEFAULT_NEWS_FETCH_TIMEOUT_MS = 2_200
DEFAULT_LLM_MODEL = "claude-sonnet-4-20250514"

SYMBOL_CACHE_KEY_PREFIX = "symbol_search:"
SYMBOL_CACHE_TTL_SECONDS = 60 * 60
SYMBOL_CACHE_MAX_SIZE = 1000

PREFERENCE_CACHE_KEY_PREFIX = "ai-agent-preferences-"
PREFERENCE_TTL_SECONDS = 60 * 60 * 24 * 365

NEWS_MAX_SYMBOLS = 2
NEWS_ITEMS_PER_SYMBOL = 5


def _read_positive_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        value = int(raw.strip())
    except ValueError:
        if raw:
            logger.debug("Ignoring non-integer %s=%r", name, raw)
        return default
    return value if value > 0 else default


def llm_timeout_ms() -> int:
    """Generation budget in milliseconds; invalid or non-positive values use the default."""
    return _read_positive_int(LLM_TIMEOUT_ENV, DEFAULT_LLM_TIMEOUT_MS)


def news_fetch_timeout_ms() -> int:
    return _read_positive_int(NEWS_FETCH_TIMEOUT_ENV, DEFAULT_NEWS_FETCH_TIMEOUT_MS)


class AssistantConfig(BaseModel):
    llm_model: str = DEFAULT_LLM_MODEL
    llm_timeout_ms: int = DEFAULT_LLM_TIMEOUT_MS
    llm_max_tokens: int = 1024
    anthropic_api_key: str = ""

    news_fetch_timeout_ms: int = DEFAULT_NEWS_FETCH_TIMEOUT_MS
    news_max_symbols: int = NEWS_MAX_SYMBOLS
    news_items_per_symbol: int = NEWS_ITEMS_PER_SYMBOL

    redis_url: str = "redis://localhost:6379/0"
    symbol_cache_size: int = SYMBOL_CACHE_MAX_SIZE
    symbol_cache_ttl_seconds: int = SYMBOL_CACHE_TTL_SECONDS
    preference_ttl_seconds: int = PREFERENCE_TTL_SECONDS

    @classmethod
    def from_env(cls) -> "AssistantConfig":
        return cls(
            llm_model=os.environ.get(LLM_MODEL_ENV) or DEFAULT_LLM_MODEL,
            llm_timeout_ms=llm_timeout_ms(),
            anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
            news_fetch_timeout_ms=news_fetch_timeout_ms(),
            redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        )

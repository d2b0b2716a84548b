"""Text-generation collaborators."""

import logging
from typing import Protocol

import anthropic
from pydantic import BaseModel

from folio_assistant.config import DEFAULT_LLM_MODEL

logger = logging.getLogger(__name__)


class GenerationResult(BaseModel):
    text: str | None = None


class TextGenerator(Protocol):
    """Callable that turns a prompt plus chat messages into text."""

    async def __call__(
        self,
        *,
        prompt: str,
        messages: list[dict[str, str]],
        model: str | None = None,
    ) -> GenerationResult: ...


class AnthropicTextGenerator:
    """Claude-backed generator; the system message is lifted out of ``messages``."""

    def __init__(
        self,
        api_key: str = "",
        model: str = DEFAULT_LLM_MODEL,
        max_tokens: int = 1024,
    ) -> None:
        self._api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self._client: anthropic.AsyncAnthropic | None = None

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not self._api_key:
                raise RuntimeError("ANTHROPIC_API_KEY required for generation")
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def __call__(
        self,
        *,
        prompt: str,
        messages: list[dict[str, str]],
        model: str | None = None,
    ) -> GenerationResult:
        system = "\n".join(m["content"] for m in messages if m["role"] == "system")
        chat = [
            {"role": m["role"], "content": m["content"]}
            for m in messages
            if m["role"] in ("user", "assistant")
        ]
        if not chat:
            chat = [{"role": "user", "content": prompt}]

        kwargs: dict = {
            "model": model or self.model,
            "max_tokens": self.max_tokens,
            "messages": chat,
        }
        if system:
            kwargs["system"] = system

        response = await self.client.messages.create(**kwargs)
        text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        logger.debug("Generated %d characters with %s", len(text), kwargs["model"])
        return GenerationResult(text=text)

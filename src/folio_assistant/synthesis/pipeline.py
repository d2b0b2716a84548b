"""Answer synthesis: race generation against a timeout, gate it, or fall back.

The pipeline always returns a non-empty string. Timeouts, generator errors
and gate rejections all end in the same deterministic fallback.
"""

import asyncio
import logging
from enum import StrEnum

from folio_assistant.analysis.symbol_resolver import extract_alias_matches
from folio_assistant.config import llm_timeout_ms
from folio_assistant.models.context import AnswerRequest, PortfolioAnalysis
from folio_assistant.synthesis.fallback import compose_fallback
from folio_assistant.synthesis.gate import is_generated_answer_reliable
from folio_assistant.synthesis.generation import TextGenerator
from folio_assistant.synthesis.intents import (
    is_fundamentals_query,
    is_news_query,
    is_quote_query,
    requested_top_count,
)
from folio_assistant.synthesis.prompts import build_messages, build_prompt

logger = logging.getLogger(__name__)

DEFAULT_TOP_HOLDINGS = 3

# Generations that lost the race keep running; hold a reference until they finish.
_background_tasks: set[asyncio.Future] = set()


class GenerationOutcome(StrEnum):
    ANSWERED = "answered"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    UNRELIABLE = "unreliable"


def _discard_late_result(task: asyncio.Future) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Late generation failed after timeout: %s", exc)
    else:
        logger.debug("Discarding generation that finished after timeout")


async def race_generation(
    generate_text: TextGenerator,
    *,
    prompt: str,
    messages: list[dict[str, str]],
    model: str | None,
    timeout_seconds: float,
) -> tuple[GenerationOutcome, str | None]:
    """Run one generation call against a timer without cancelling it."""
    try:
        task = asyncio.ensure_future(
            generate_text(prompt=prompt, messages=messages, model=model)
        )
    except Exception as e:
        logger.warning("Generation call could not start: %s", e)
        return GenerationOutcome.FAILED, None

    done, _ = await asyncio.wait({task}, timeout=timeout_seconds)
    if task not in done:
        _background_tasks.add(task)
        task.add_done_callback(_discard_late_result)
        return GenerationOutcome.TIMED_OUT, None

    if task.cancelled():
        return GenerationOutcome.FAILED, None
    exc = task.exception()
    if exc is not None:
        logger.warning("Generation failed: %s", exc)
        return GenerationOutcome.FAILED, None

    result = task.result()
    text = getattr(result, "text", None)
    if not isinstance(text, str) or not text.strip():
        return GenerationOutcome.FAILED, None
    return GenerationOutcome.ANSWERED, text


async def build_answer(request: AnswerRequest, generate_text: TextGenerator) -> str:
    timeout_ms = llm_timeout_ms()
    prompt = build_prompt(request)
    messages = build_messages(request, prompt)

    outcome, text = await race_generation(
        generate_text,
        prompt=prompt,
        messages=messages,
        model=request.model,
        timeout_seconds=timeout_ms / 1000,
    )

    if outcome is GenerationOutcome.ANSWERED and text is not None:
        if is_generated_answer_reliable(text, request.query, prompt):
            logger.info("Answer outcome: %s", outcome)
            return text
        outcome = GenerationOutcome.UNRELIABLE

    if outcome is GenerationOutcome.TIMED_OUT:
        logger.warning("Generation exceeded %d ms, using fallback", timeout_ms)
    logger.info("Answer outcome: %s", outcome)
    return compose_fallback(request)


def resolve_symbols(
    query: str,
    portfolio_analysis: PortfolioAnalysis | None = None,
    symbols: list[str] | None = None,
) -> list[str]:
    """Symbols a query is about.

    Explicit symbols and tickers or aliases named in the query come first.
    When none are found, fundamentals, news and quote queries fall back to
    the top holdings by allocation ("top 5" picks five, default three).
    """
    explicit = [s.strip().upper() for s in symbols or [] if s and s.strip()]
    named, _ = extract_alias_matches(query)
    resolved = list(dict.fromkeys([*explicit, *named]))
    if resolved:
        return resolved

    wants_holdings = (
        is_fundamentals_query(query) or is_news_query(query) or is_quote_query(query)
    )
    if not wants_holdings or not portfolio_analysis:
        return []

    count = requested_top_count(query) or DEFAULT_TOP_HOLDINGS
    ranked = sorted(
        portfolio_analysis.holdings,
        key=lambda h: h.allocation_in_percentage,
        reverse=True,
    )
    return [h.symbol for h in ranked[:count]]

"""Reliability gate for generated answers.

A rejected answer is discarded whole; the pipeline never patches it.
"""

import logging
import re
from difflib import SequenceMatcher

from folio_assistant.synthesis.intents import (
    has_investment_intent,
    has_numeric_intent,
    is_recommendation_query,
    normalize_intent_query,
)

logger = logging.getLogger(__name__)

MINIMUM_GENERATED_ANSWER_WORDS = 12
ECHO_SIMILARITY_THRESHOLD = 0.9
ECHO_MIN_QUERY_WORDS = 3

ACTIONABLE_KEYWORDS = (
    "add",
    "allocate",
    "buy",
    "hedge",
    "increase",
    "monitor",
    "rebalance",
    "reduce",
    "sell",
    "trim",
)
DISALLOWED_RESPONSE_PATTERNS = (
    re.compile(r"\bas an ai\b", re.IGNORECASE),
    re.compile(r"\bi am not (?:a|your) financial advisor\b", re.IGNORECASE),
    re.compile(r"\bi can(?:not|'t) provide financial advice\b", re.IGNORECASE),
    re.compile(r"\bconsult (?:a|your) financial advisor\b", re.IGNORECASE),
)
OPTION_ONE_PATTERN = re.compile(r"\boption\s*1\b", re.IGNORECASE)
OPTION_TWO_PATTERN = re.compile(r"\boption\s*2\b", re.IGNORECASE)
DIGIT_PATTERN = re.compile(r"\d")


def _similar(a: str, b: str) -> bool:
    matcher = SequenceMatcher(None, a, b)
    return (
        matcher.real_quick_ratio() >= ECHO_SIMILARITY_THRESHOLD
        and matcher.ratio() >= ECHO_SIMILARITY_THRESHOLD
    )


def is_prompt_echo(answer: str, query: str, prompt: str | None = None) -> bool:
    """True when the answer repeats what was sent rather than answering it.

    The answer echoes when it is a fragment of the query or prompt, carries
    the whole prompt (or a multi-word query) verbatim, or nearly matches
    either one.
    """
    a = normalize_intent_query(answer)
    if not a:
        return False

    q = normalize_intent_query(query)
    if q:
        if a in q or _similar(a, q):
            return True
        if len(q.split()) >= ECHO_MIN_QUERY_WORDS and q in a:
            return True

    p = normalize_intent_query(prompt or "")
    if p:
        if a in p or p in a or _similar(a, p):
            return True
    return False


def is_generated_answer_reliable(
    answer: str, query: str, prompt: str | None = None
) -> bool:
    text = answer.strip()
    if not text:
        return False

    if any(p.search(text) for p in DISALLOWED_RESPONSE_PATTERNS):
        logger.debug("Gate: disallowed phrase")
        return False

    investment = has_investment_intent(query)
    numeric = has_numeric_intent(query)
    lowered = text.lower()

    if (investment or numeric) and len(text.split()) < MINIMUM_GENERATED_ANSWER_WORDS:
        logger.debug("Gate: answer too short for query intent")
        return False

    if investment and not any(k in lowered for k in ACTIONABLE_KEYWORDS):
        logger.debug("Gate: no actionable guidance")
        return False

    if numeric and not DIGIT_PATTERN.search(text):
        logger.debug("Gate: no numeric signal")
        return False

    if is_recommendation_query(query) and not (
        OPTION_ONE_PATTERN.search(text) and OPTION_TWO_PATTERN.search(text)
    ):
        logger.debug("Gate: recommendation without two labelled options")
        return False

    if is_prompt_echo(text, query, prompt):
        logger.debug("Gate: answer echoes the query or prompt")
        return False

    return True

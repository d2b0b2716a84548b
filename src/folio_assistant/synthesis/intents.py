"""Query intent detection shared by prompts, the reliability gate and fallbacks."""

import re

INVESTMENT_INTENT_KEYWORDS = (
    "add",
    "allocat",
    "buy",
    "how do i",
    "invest",
    "next",
    "rebalanc",
    "sell",
    "trim",
    "what can i do",
    "what should i do",
    "where should i",
)
NUMERIC_INTENT_KEYWORDS = (
    "allocat",
    "balance",
    "drawdown",
    "hhi",
    "market",
    "money",
    "performance",
    "price",
    "quote",
    "return",
    "risk",
    "shock",
    "stress",
    "trim",
    "worth",
)

RECOMMENDATION_PATTERNS = (
    re.compile(r"\bdiversif"),
    re.compile(r"\bwhat\s+(?:should|can)\s+i\s+do\b"),
    re.compile(r"\bwhere\s+should\s+i\s+(?:invest|put|add)\b"),
    re.compile(
        r"\bhow\s+(?:do|can|should)\s+i\s+"
        r"(?:reduce|lower|diversify|fix|improve|rebalance)\b"
    ),
    re.compile(r"\brecommend"),
    re.compile(r"\bsuggest"),
)
# Tolerates one stray leading letter, e.g. "wfundamentals".
FUNDAMENTALS_PATTERNS = (
    re.compile(r"\b[a-z]?fundamentals?\b"),
    re.compile(r"\bvaluation\b"),
    re.compile(r"\bmarket\s+cap\b"),
    re.compile(r"\bp\s*/?\s*e\s+ratio\b"),
    re.compile(r"\bdividend\s+yield\b"),
    re.compile(r"\bbalance\s+sheet\b"),
    re.compile(r"\bcompany\s+analysis\b"),
)
NEWS_PATTERNS = (
    re.compile(r"\bnews\b"),
    re.compile(r"\bheadlines?\b"),
    re.compile(r"\bcatalysts?\b"),
    re.compile(r"\bwhat\s+happened\s+to\b"),
    re.compile(r"\bwhy\s+did\b"),
)
QUOTE_PATTERNS = (
    re.compile(r"\bquotes?\b"),
    re.compile(r"\bprices?\b"),
    re.compile(r"\btrading\s+at\b"),
    re.compile(r"\bmarket\s+data\b"),
)
TOP_COUNT_PATTERN = re.compile(r"\btop\s+(\d{1,2})\b")

NON_ALNUM_PATTERN = re.compile(r"[^a-z0-9\s]+")


def normalize_intent_query(query: str) -> str:
    lowered = NON_ALNUM_PATTERN.sub(" ", query.lower())
    return " ".join(lowered.split())


def _any(patterns: tuple[re.Pattern[str], ...], query: str) -> bool:
    normalized = normalize_intent_query(query)
    return any(p.search(normalized) for p in patterns)


def has_investment_intent(query: str) -> bool:
    lowered = query.lower()
    return any(keyword in lowered for keyword in INVESTMENT_INTENT_KEYWORDS)


def has_numeric_intent(query: str) -> bool:
    lowered = query.lower()
    return any(keyword in lowered for keyword in NUMERIC_INTENT_KEYWORDS)


def is_recommendation_query(query: str) -> bool:
    """Action or diversification requests that call for two labelled options."""
    return _any(RECOMMENDATION_PATTERNS, query)


def is_fundamentals_query(query: str) -> bool:
    return _any(FUNDAMENTALS_PATTERNS, query)


def is_news_query(query: str) -> bool:
    return _any(NEWS_PATTERNS, query)


def is_quote_query(query: str) -> bool:
    return _any(QUOTE_PATTERNS, query)


def requested_top_count(query: str) -> int | None:
    match = TOP_COUNT_PATTERN.search(normalize_intent_query(query))
    if not match:
        return None
    count = int(match.group(1))
    return count if count > 0 else None

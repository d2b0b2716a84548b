"""Per-symbol headline aggregation and the deterministic news brief."""

import asyncio
import logging
import re
from itertools import zip_longest

from folio_assistant.config import NEWS_ITEMS_PER_SYMBOL, NEWS_MAX_SYMBOLS
from folio_assistant.data.news_client import StockNewsClient
from folio_assistant.data.search_provider import SearchProvider, fetch_symbol_names
from folio_assistant.models.news import (
    NewsResponse,
    StockNewsResult,
    SymbolNewsData,
    WebNewsSearchResult,
)

logger = logging.getLogger(__name__)

NO_NEWS_SUMMARY = "No recent news found for the specified symbols."
WATCH_NEXT_LINE = (
    "Watch next: earnings guidance, estimate revisions, and valuation sensitivity."
)
MAX_BRIEF_HEADLINES = 5
MAX_BRIEF_COVERAGE = 2

COVERAGE_PATTERN = re.compile(r"\([A-Z0-9]{1,6}(?:\.[A-Z0-9]{1,4})?\)$")


def normalize_symbols(symbols: list[str], limit: int) -> list[str]:
    unique = dict.fromkeys(s.strip().upper() for s in symbols if s and s.strip())
    return list(unique)[:limit]


def format_web_news_summary(
    results_by_symbol: dict[str, SymbolNewsData],
    max_items_per_symbol: int = NEWS_ITEMS_PER_SYMBOL,
) -> str:
    if not results_by_symbol:
        return NO_NEWS_SUMMARY

    blocks: list[str] = []
    for symbol, data in results_by_symbol.items():
        lines = [f"\n{data.name} ({symbol})"]
        lines.append(f"Found {data.news.total_results} recent news articles:\n")
        for item in data.news.results[:max_items_per_symbol]:
            lines.append(f"- {item.title.strip()}")
            lines.append(f"  {item.snippet.strip()}")
            lines.append(f"  Source: {item.source}")
            lines.append(f"  Link: {item.link}\n")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


async def search_web_news_for_symbols(
    symbols: list[str],
    news_client: StockNewsClient,
    search_provider: SearchProvider,
    max_items_per_symbol: int = NEWS_ITEMS_PER_SYMBOL,
    max_symbols: int = NEWS_MAX_SYMBOLS,
) -> WebNewsSearchResult:
    """Fetch recent headlines for up to ``max_symbols`` symbols concurrently.

    Output is ordered by the normalized request order, never by completion
    order. Symbols whose search fails or returns nothing are left out.
    """
    working_set = normalize_symbols(symbols, max_symbols)
    if not working_set:
        return WebNewsSearchResult(formatted_summary="", success=True)

    names = await fetch_symbol_names(working_set, search_provider)
    display_names = {s: names.get(s) or s for s in working_set}

    results = await asyncio.gather(
        *[
            news_client.search_stock_news(
                symbol, display_names[symbol], max_items=max_items_per_symbol
            )
            for symbol in working_set
        ],
        return_exceptions=True,
    )

    by_symbol: dict[str, SymbolNewsData] = {}
    for symbol, result in zip(working_set, results):
        if isinstance(result, BaseException):
            logger.warning("News search failed for %s: %s", symbol, result)
            continue
        if not isinstance(result, StockNewsResult):
            continue
        if not result.success or not result.results:
            logger.debug("No news results for %s", symbol)
            continue
        name = display_names[symbol]
        by_symbol[symbol] = SymbolNewsData(
            name=name,
            news=NewsResponse(
                query=f"{symbol} {name} news",
                results=result.results,
                total_results=len(result.results),
            ),
        )

    return WebNewsSearchResult(
        formatted_summary=format_web_news_summary(by_symbol, max_items_per_symbol),
        search_results_by_symbol=by_symbol,
        success=len(by_symbol) > 0,
        symbols_searched=list(by_symbol),
    )


def _brief_sources(summary: str) -> tuple[list[str], list[list[str]]]:
    """Split a summary into coverage headers and per-block headline lists.

    A header is an unindented line ending in ``(TICKER)``; indented item
    lines such as ``Source: ...`` never count.
    """
    coverage: list[str] = []
    blocks: list[list[str]] = [[]]
    for raw in summary.splitlines():
        line = raw.strip()
        if line.startswith("- "):
            blocks[-1].append(line)
        elif raw[:1].strip() and COVERAGE_PATTERN.search(line):
            coverage.append(line)
            blocks.append([])
    return coverage, [b for b in blocks if b]


def build_news_brief(
    financial_news_summary: str | None, market_snapshot: str | None = None
) -> str | None:
    """Condense a news summary into a headline brief.

    Headlines are taken round-robin across symbol blocks so every covered
    symbol gets a slot. Returns None when the summary carries no ``- ``
    headline lines. ``market_snapshot`` is inserted just before the closing
    watch line.
    """
    coverage, blocks = _brief_sources(financial_news_summary or "")
    headlines = [
        line
        for row in zip_longest(*blocks)
        for line in row
        if line is not None
    ][:MAX_BRIEF_HEADLINES]
    if not headlines:
        return None

    brief = ["News brief:"]
    if coverage:
        brief.append(f"Coverage: {', '.join(coverage[:MAX_BRIEF_COVERAGE])}.")
    brief.extend(headlines)
    if market_snapshot:
        brief.append(market_snapshot)
    brief.append(WATCH_NEXT_LINE)
    return "\n".join(brief)

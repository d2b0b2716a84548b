import asyncio
import logging
from typing import Any, Protocol

import yfinance as yf

from folio_assistant.models.symbols import DEFAULT_DATA_SOURCE, LookupItem, SearchResponse

logger = logging.getLogger(__name__)

INDEX_QUOTE_TYPES = frozenset({"INDEX"})
DEFAULT_MAX_RESULTS = 8


class SearchProvider(Protocol):
    """Protocol for instrument search backends."""

    async def search(
        self,
        query: str,
        user: Any = None,
        include_indices: bool = False,
    ) -> SearchResponse:
        """Return instruments matching a free-text query."""
        ...


def _to_lookup_item(quote: dict) -> LookupItem | None:
    symbol = quote.get("symbol")
    if not symbol:
        return None
    quote_type = quote.get("quoteType") or None
    return LookupItem(
        symbol=symbol,
        name=quote.get("longname") or quote.get("shortname") or None,
        currency=quote.get("currency") or None,
        data_source=DEFAULT_DATA_SOURCE,
        asset_class=quote_type,
        asset_sub_class=quote.get("typeDisp") or None,
    )


class YFinanceSearchProvider:
    """Symbol search backed by Yahoo Finance's lookup endpoint."""

    def __init__(self, max_results: int = DEFAULT_MAX_RESULTS) -> None:
        self.max_results = max_results

    def _search_sync(self, query: str) -> list[dict]:
        result = yf.Search(query, max_results=self.max_results, news_count=0)
        return list(result.quotes or [])

    async def search(
        self,
        query: str,
        user: Any = None,
        include_indices: bool = False,
    ) -> SearchResponse:
        try:
            quotes = await asyncio.to_thread(self._search_sync, query)
        except Exception:
            logger.warning("Symbol search failed for %r", query)
            return SearchResponse()

        items: list[LookupItem] = []
        for quote in quotes:
            if not include_indices and quote.get("quoteType") in INDEX_QUOTE_TYPES:
                continue
            item = _to_lookup_item(quote)
            if item is not None:
                items.append(item)
        return SearchResponse(items=items)


async def fetch_symbol_names(
    symbols: list[str],
    search_provider: SearchProvider,
) -> dict[str, str]:
    """Look up display names for symbols; unresolved symbols are omitted."""

    async def lookup(symbol: str) -> tuple[str, str | None]:
        response = await search_provider.search(query=symbol)
        for item in response.items:
            if item.symbol.upper() == symbol.upper() and item.name:
                return symbol, item.name
        return symbol, None

    results = await asyncio.gather(
        *[lookup(s) for s in symbols],
        return_exceptions=True,
    )

    names: dict[str, str] = {}
    for r in results:
        if isinstance(r, BaseException):
            logger.warning("Name lookup failed: %s", r)
            continue
        symbol, name = r
        if name:
            names[symbol] = name
    return names

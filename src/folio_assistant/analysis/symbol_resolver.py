"""Resolve free-text company and fund mentions to ticker symbols.

Resolution walks four layers and stops at the first hit:

1. static alias table (confidence 1.0, never cached)
2. in-process LRU cache (0.9)
3. distributed cache (0.85)
4. search provider, scored by how well the returned name matches (0.6-0.95)
"""

import logging
import re
import time
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from folio_assistant.analysis.symbol_aliases import (
    COMPANY_NAME_SYMBOL_ALIASES,
    FINANCE_STOP_WORDS,
    TICKER_STOP_WORDS,
)
from folio_assistant.config import (
    SYMBOL_CACHE_KEY_PREFIX,
    SYMBOL_CACHE_MAX_SIZE,
    SYMBOL_CACHE_TTL_SECONDS,
)
from folio_assistant.data.bounded_cache import BoundedCache
from folio_assistant.data.cache_provider import CacheProvider
from folio_assistant.data.search_provider import SearchProvider
from folio_assistant.models.symbols import (
    DEFAULT_DATA_SOURCE,
    CacheEntry,
    LookupItem,
    ResolvedSymbol,
)

logger = logging.getLogger(__name__)

ALIAS_CONFIDENCE = 1.0
MEMORY_CACHE_CONFIDENCE = 0.9
DISTRIBUTED_CACHE_CONFIDENCE = 0.85

EXACT_MATCH_CONFIDENCE = 0.95
STARTS_WITH_CONFIDENCE = 0.85
CONTAINS_CONFIDENCE = 0.75
FALLBACK_CONFIDENCE = 0.6

MIN_ENTITY_LENGTH = 2

ALIAS_PATTERNS: tuple[tuple[str, str, re.Pattern[str]], ...] = tuple(
    (alias, symbol, re.compile(rf"\b{re.escape(alias)}\b", re.IGNORECASE))
    for alias, symbol in COMPANY_NAME_SYMBOL_ALIASES.items()
)
TICKER_PATTERN = re.compile(r"(?<![\w$])\$?([A-Z]{2,6})\b")
PUNCTUATION_PATTERN = re.compile(r"[^\w\s]")


def normalize_entity(entity: str) -> str:
    return entity.lower().strip()


def cache_key(entity: str) -> str:
    return f"{SYMBOL_CACHE_KEY_PREFIX}{normalize_entity(entity)}"


def find_best_match(query: str, items: list[LookupItem]) -> LookupItem | None:
    """Pick the first exact, then starts-with, then contains name match."""
    if not items:
        return None
    q = normalize_entity(query)
    names = [(item, (item.name or "").lower()) for item in items]

    for item, name in names:
        if name and name == q:
            return item
    for item, name in names:
        if name and name.startswith(q):
            return item
    for item, name in names:
        if name and q in name:
            return item
    return items[0]


def match_confidence(query: str, item: LookupItem) -> float:
    q = normalize_entity(query)
    name = (item.name or "").lower()
    if name and name == q:
        return EXACT_MATCH_CONFIDENCE
    if name and name.startswith(q):
        return STARTS_WITH_CONFIDENCE
    if name and q in name:
        return CONTAINS_CONFIDENCE
    return FALLBACK_CONFIDENCE


def resolve_alias(entity: str) -> str | None:
    return COMPANY_NAME_SYMBOL_ALIASES.get(normalize_entity(entity))


def extract_alias_matches(query: str) -> tuple[list[str], list[str]]:
    """Scan the raw query for alias names and ticker-shaped tokens.

    Returns (symbols, covered_terms) where covered_terms are the lower-cased
    alias phrases and tickers that produced a symbol.
    """
    symbols: list[str] = []
    covered: list[str] = []

    for alias, symbol, pattern in ALIAS_PATTERNS:
        if pattern.search(query):
            symbols.append(symbol)
            covered.append(alias)

    for match in TICKER_PATTERN.finditer(query):
        ticker = match.group(1)
        if ticker in TICKER_STOP_WORDS:
            continue
        symbols.append(ticker)
        covered.append(ticker.lower())

    return list(dict.fromkeys(symbols)), list(dict.fromkeys(covered))


def _overlaps(entity: str, term: str) -> bool:
    padded_entity = f" {entity} "
    padded_term = f" {term} "
    return padded_term in padded_entity or padded_entity in padded_term


class SymbolResolver:
    """Layered alias → memory → distributed cache → search resolution."""

    def __init__(
        self,
        search_provider: SearchProvider,
        cache_provider: CacheProvider,
        memory_cache: BoundedCache[str, CacheEntry] | None = None,
        ttl_seconds: int = SYMBOL_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.search_provider = search_provider
        self.cache_provider = cache_provider
        self.memory_cache: BoundedCache[str, CacheEntry] = (
            memory_cache
            if memory_cache is not None
            else BoundedCache(SYMBOL_CACHE_MAX_SIZE)
        )
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    async def resolve(
        self, entities: list[str], user_context: Any = None
    ) -> list[ResolvedSymbol]:
        if not entities:
            return []

        unique = dict.fromkeys(normalize_entity(e) for e in entities if e)
        results: list[ResolvedSymbol] = []
        for entity in unique:
            if len(entity) < MIN_ENTITY_LENGTH:
                continue
            resolved = await self._resolve_entity(entity, user_context)
            if resolved is not None:
                results.append(resolved)
        return results

    async def _resolve_entity(
        self, entity: str, user_context: Any
    ) -> ResolvedSymbol | None:
        symbol = resolve_alias(entity)
        if symbol:
            return ResolvedSymbol(
                symbol=symbol,
                name=symbol,
                data_source=DEFAULT_DATA_SOURCE,
                confidence=ALIAS_CONFIDENCE,
                cached=False,
            )

        hit = self._from_memory(entity)
        if hit is not None:
            return hit

        hit = await self._from_distributed(entity)
        if hit is not None:
            return hit

        resolved = await self._from_search(entity, user_context)
        if resolved is not None:
            return resolved

        logger.debug("Unresolved entity: %r", entity)
        return None

    def _from_memory(self, entity: str) -> ResolvedSymbol | None:
        entry = self.memory_cache.get(entity)
        if entry is None:
            return None

        age = self._clock() - (entry.resolved_at or 0.0)
        if age >= self.ttl_seconds:
            # Coarse invalidation: one stale entry drops the whole tier.
            logger.info("Expired entry for %r, clearing in-process cache", entity)
            self.memory_cache.clear()
            return None

        return ResolvedSymbol(
            symbol=entry.symbol,
            name=entry.name,
            data_source=entry.data_source,
            confidence=MEMORY_CACHE_CONFIDENCE,
            cached=True,
        )

    async def _from_distributed(self, entity: str) -> ResolvedSymbol | None:
        try:
            raw = await self.cache_provider.get(cache_key(entity))
        except Exception:
            logger.warning("Distributed cache read failed for %r", entity)
            return None
        if not raw:
            return None

        try:
            entry = CacheEntry.model_validate_json(raw)
        except (ValidationError, ValueError):
            logger.debug("Dropping malformed cache entry for %r", entity)
            try:
                await self.cache_provider.delete(cache_key(entity))
            except Exception:
                logger.warning("Distributed cache delete failed for %r", entity)
            return None

        return ResolvedSymbol(
            symbol=entry.symbol,
            name=entry.name,
            data_source=entry.data_source,
            confidence=DISTRIBUTED_CACHE_CONFIDENCE,
            cached=True,
        )

    async def _from_search(
        self, entity: str, user_context: Any
    ) -> ResolvedSymbol | None:
        try:
            response = await self.search_provider.search(
                query=entity, user=user_context, include_indices=False
            )
        except Exception as e:
            logger.warning("Search provider failed for %r: %s", entity, e)
            return None

        best = find_best_match(entity, response.items)
        if best is None:
            return None

        entry = CacheEntry(
            symbol=best.symbol,
            name=best.name or best.symbol,
            data_source=best.data_source,
            resolved_at=self._clock(),
        )
        self.memory_cache.set(entity, entry)
        try:
            await self.cache_provider.set(
                cache_key(entity), entry.to_json(), self.ttl_seconds
            )
        except Exception:
            logger.warning("Distributed cache write failed for %r", entity)

        return ResolvedSymbol(
            symbol=entry.symbol,
            name=entry.name,
            data_source=entry.data_source,
            confidence=match_confidence(entity, best),
            cached=False,
        )

    def extract_potential_entities(self, query: str) -> list[str]:
        return extract_potential_entities(query)

    async def extract_symbols_from_query(
        self, query: str, user_context: Any = None
    ) -> list[str]:
        """Alias/ticker fast path unioned with dynamic resolution of the rest."""
        alias_symbols, covered = extract_alias_matches(query)

        entities = [
            entity
            for entity in extract_potential_entities(query)
            if not any(_overlaps(entity, term) for term in covered)
        ]
        resolved = await self.resolve(entities, user_context)

        symbols = list(dict.fromkeys([*alias_symbols, *(r.symbol for r in resolved)]))
        logger.debug("Extracted %d symbols from query: %.50s", len(symbols), query)
        return symbols

    def clear_cache(self) -> None:
        self.memory_cache.clear()
        logger.info("Symbol resolver in-process cache cleared")


def extract_potential_entities(query: str) -> list[str]:
    """Candidate single words plus 2- and 3-word phrases, stop words removed."""
    cleaned = PUNCTUATION_PATTERN.sub(" ", query.lower().strip())
    tokens = [
        t for t in cleaned.split() if len(t) > 1 and t not in FINANCE_STOP_WORDS
    ]

    entities: list[str] = list(tokens)
    entities.extend(f"{a} {b}" for a, b in zip(tokens, tokens[1:]))
    entities.extend(
        f"{a} {b} {c}" for a, b, c in zip(tokens, tokens[1:], tokens[2:])
    )
    return list(dict.fromkeys(entities))

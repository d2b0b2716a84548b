import pytest

from folio_assistant.data.cache_provider import InMemoryCacheProvider
from folio_assistant.models.context import PortfolioAnalysis, PortfolioHolding
from folio_assistant.models.symbols import LookupItem, SearchResponse


class StubSearchProvider:
    """Returns canned items per query and records every call."""

    def __init__(
        self,
        items: dict[str, list[LookupItem]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.items = items or {}
        self.error = error
        self.calls: list[str] = []

    async def search(self, query, user=None, include_indices=False):
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return SearchResponse(items=self.items.get(query.lower(), []))


class BrokenCacheProvider:
    async def get(self, key):
        raise ConnectionError("cache down")

    async def set(self, key, value, ttl_seconds):
        raise ConnectionError("cache down")

    async def delete(self, key):
        raise ConnectionError("cache down")

    async def clear(self):
        raise ConnectionError("cache down")


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def lookup(symbol: str, name: str | None) -> LookupItem:
    return LookupItem(symbol=symbol, name=name, currency="USD", data_source="YAHOO")


def holdings(*pairs: tuple[str, float], total: float = 10_000.0) -> PortfolioAnalysis:
    return PortfolioAnalysis(
        holdings=[
            PortfolioHolding(
                symbol=symbol,
                allocation_in_percentage=allocation,
                value_in_base_currency=allocation * total,
            )
            for symbol, allocation in pairs
        ],
        holdings_count=len(pairs),
        total_value_in_base_currency=total,
        allocation_sum=sum(a for _, a in pairs),
    )


@pytest.fixture
def cache_provider() -> InMemoryCacheProvider:
    return InMemoryCacheProvider()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

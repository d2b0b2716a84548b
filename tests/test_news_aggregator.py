import asyncio

from conftest import StubSearchProvider, lookup

from folio_assistant.analysis.news_aggregator import (
    NO_NEWS_SUMMARY,
    build_news_brief,
    search_web_news_for_symbols,
)
from folio_assistant.models.news import NewsResultItem, StockNewsResult


class StubNewsClient:
    """Canned headlines per symbol; earlier symbols answer later."""

    def __init__(self, headlines: dict[str, list[str]], delays: dict[str, float] | None = None):
        self.headlines = headlines
        self.delays = delays or {}
        self.calls: list[tuple[str, str | None]] = []
        self.completed: list[str] = []

    async def search_stock_news(self, symbol, company_name=None, max_items=5):
        self.calls.append((symbol, company_name))
        await asyncio.sleep(self.delays.get(symbol, 0))
        self.completed.append(symbol)
        titles = self.headlines.get(symbol)
        if titles is None:
            raise RuntimeError("feed unavailable")
        results = [
            NewsResultItem(
                title=t,
                link=f"https://news.example.com/{symbol.lower()}/{i}",
                snippet=f"{t} snippet",
                source=f"{company_name} ({symbol})",
            )
            for i, t in enumerate(titles[:max_items])
        ]
        return StockNewsResult(results=results, success=bool(results))


NAMES = StubSearchProvider(
    {
        "aapl": [lookup("AAPL", "Apple Inc.")],
        "msft": [lookup("MSFT", "Microsoft Corporation")],
    }
)


class TestSearchWebNewsForSymbols:
    def test_empty_symbols_is_success(self):
        client = StubNewsClient({})
        result = asyncio.run(search_web_news_for_symbols([], client, NAMES))

        assert result.success is True
        assert result.formatted_summary == ""
        assert result.symbols_searched == []
        assert client.calls == []

    def test_caps_and_dedupes_symbols(self):
        client = StubNewsClient({"AAPL": ["a"], "MSFT": ["m"], "NVDA": ["n"]})
        result = asyncio.run(
            search_web_news_for_symbols(
                [" aapl", "AAPL", "msft", "nvda"], client, StubSearchProvider()
            )
        )

        assert [symbol for symbol, _ in client.calls] == ["AAPL", "MSFT"]
        assert result.symbols_searched == ["AAPL", "MSFT"]

    def test_order_follows_request_not_completion(self):
        client = StubNewsClient(
            {"AAPL": ["Apple headline"], "MSFT": ["Microsoft headline"]},
            delays={"AAPL": 0.05},
        )
        result = asyncio.run(search_web_news_for_symbols(["AAPL", "MSFT"], client, NAMES))

        assert client.completed == ["MSFT", "AAPL"]
        assert list(result.search_results_by_symbol) == ["AAPL", "MSFT"]
        summary = result.formatted_summary
        assert summary.index("Apple Inc. (AAPL)") < summary.index(
            "Microsoft Corporation (MSFT)"
        )

    def test_uses_looked_up_names(self):
        client = StubNewsClient({"AAPL": ["x"]})
        asyncio.run(search_web_news_for_symbols(["AAPL"], client, NAMES))
        assert client.calls == [("AAPL", "Apple Inc.")]

    def test_name_falls_back_to_symbol(self):
        client = StubNewsClient({"ZZZ": ["x"]})
        result = asyncio.run(search_web_news_for_symbols(["zzz"], client, NAMES))

        assert client.calls == [("ZZZ", "ZZZ")]
        assert result.search_results_by_symbol["ZZZ"].name == "ZZZ"

    def test_summary_format(self):
        client = StubNewsClient({"AAPL": ["Apple ships", "Apple earnings"]})
        result = asyncio.run(search_web_news_for_symbols(["AAPL"], client, NAMES))

        assert result.formatted_summary == (
            "\nApple Inc. (AAPL)\n"
            "Found 2 recent news articles:\n\n"
            "- Apple ships\n"
            "  Apple ships snippet\n"
            "  Source: Apple Inc. (AAPL)\n"
            "  Link: https://news.example.com/aapl/0\n\n"
            "- Apple earnings\n"
            "  Apple earnings snippet\n"
            "  Source: Apple Inc. (AAPL)\n"
            "  Link: https://news.example.com/aapl/1\n"
        )
        data = result.search_results_by_symbol["AAPL"]
        assert data.news.query == "AAPL Apple Inc. news"
        assert data.news.total_results == 2

    def test_failed_and_empty_symbols_are_excluded(self):
        client = StubNewsClient({"MSFT": []})
        result = asyncio.run(search_web_news_for_symbols(["AAPL", "MSFT"], client, NAMES))

        assert result.success is False
        assert result.symbols_searched == []
        assert result.formatted_summary == NO_NEWS_SUMMARY

    def test_partial_success(self):
        client = StubNewsClient({"MSFT": ["Microsoft headline"]})
        result = asyncio.run(search_web_news_for_symbols(["AAPL", "MSFT"], client, NAMES))

        assert result.success is True
        assert result.symbols_searched == ["MSFT"]

    def test_items_per_symbol_limit(self):
        client = StubNewsClient({"AAPL": ["1", "2", "3"]})
        result = asyncio.run(
            search_web_news_for_symbols(["AAPL"], client, NAMES, max_items_per_symbol=2)
        )
        assert result.formatted_summary.count("\n- ") == 2


class TestBuildNewsBrief:
    def test_brief_from_summary(self):
        summary = "\n".join(
            [
                "News catalysts (latest):",
                "- NVDA raises data-center guidance.",
                "- Analysts revised earnings estimates upward.",
            ]
        )
        brief = build_news_brief(summary)

        assert brief == "\n".join(
            [
                "News brief:",
                "- NVDA raises data-center guidance.",
                "- Analysts revised earnings estimates upward.",
                "Watch next: earnings guidance, estimate revisions, and valuation sensitivity.",
            ]
        )

    def test_coverage_line_and_market_snapshot(self):
        summary = "\nApple Inc. (AAPL)\nFound 1 recent news articles:\n\n- Apple ships\n"
        brief = build_news_brief(summary, market_snapshot="Market snapshot: AAPL 210.12 USD.")
        lines = brief.splitlines()

        assert lines[1] == "Coverage: Apple Inc. (AAPL)."
        assert lines[-2] == "Market snapshot: AAPL 210.12 USD."
        assert lines[-1].startswith("Watch next:")

    def test_headlines_capped_at_five(self):
        summary = "\n".join(f"- headline {i}" for i in range(8))
        assert build_news_brief(summary).count("- headline") == 5

    def test_no_headlines(self):
        assert build_news_brief("Nothing to see") is None
        assert build_news_brief(None) is None

    def test_every_symbol_gets_headline_slots(self):
        client = StubNewsClient(
            {
                "AAPL": [f"Apple headline {i}" for i in range(5)],
                "MSFT": [f"Microsoft headline {i}" for i in range(5)],
            }
        )
        result = asyncio.run(search_web_news_for_symbols(["AAPL", "MSFT"], client, NAMES))
        lines = build_news_brief(result.formatted_summary).splitlines()

        assert lines[1] == "Coverage: Apple Inc. (AAPL), Microsoft Corporation (MSFT)."
        assert lines[2:7] == [
            "- Apple headline 0",
            "- Microsoft headline 0",
            "- Apple headline 1",
            "- Microsoft headline 1",
            "- Apple headline 2",
        ]
        assert not any("Source:" in line for line in lines)

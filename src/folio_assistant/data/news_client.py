"""Headline search against the Yahoo Finance RSS feed."""

import logging

import httpx
from bs4 import BeautifulSoup, Tag

from folio_assistant.config import news_fetch_timeout_ms
from folio_assistant.models.news import NewsResultItem, StockNewsResult

logger = logging.getLogger(__name__)

YAHOO_HEADLINE_URL = "https://feeds.finance.yahoo.com/rss/2.0/headline"
DEFAULT_RESULT_LIMIT = 5


def _child_text(item: Tag, name: str) -> str:
    child = item.find(name)
    return child.get_text().strip() if child else ""


def _strip_html(value: str) -> str:
    if "<" not in value:
        return " ".join(value.split())
    text = BeautifulSoup(value, "html.parser").get_text(" ", strip=True)
    return " ".join(text.split())


def parse_headline_feed(
    xml: str, source: str, max_items: int = DEFAULT_RESULT_LIMIT
) -> list[NewsResultItem]:
    """Parse RSS ``<item>`` elements into news results, skipping incomplete ones."""
    soup = BeautifulSoup(xml, "xml")
    results: list[NewsResultItem] = []
    for item in soup.find_all("item"):
        if len(results) >= max_items:
            break
        title = _child_text(item, "title")
        link = _child_text(item, "link")
        if not title or not link:
            continue
        published = _child_text(item, "pubDate")
        results.append(
            NewsResultItem(
                title=" ".join(title.split()),
                link=link,
                snippet=_strip_html(_child_text(item, "description")),
                source=source,
                published_date=published or None,
            )
        )
    return results


class StockNewsClient:
    """Fetches recent headlines per ticker; every failure yields an empty result."""

    def __init__(
        self,
        timeout_ms: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_ms = timeout_ms
        self._transport = transport

    @property
    def timeout_seconds(self) -> float:
        ms = self._timeout_ms if self._timeout_ms else news_fetch_timeout_ms()
        return ms / 1000

    async def search_stock_news(
        self,
        symbol: str,
        company_name: str | None = None,
        max_items: int = DEFAULT_RESULT_LIMIT,
    ) -> StockNewsResult:
        normalized = symbol.strip().upper()
        if not normalized:
            return StockNewsResult(results=[], success=False)

        params = {"s": normalized, "region": "US", "lang": "en-US"}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                resp = await client.get(YAHOO_HEADLINE_URL, params=params)
                resp.raise_for_status()
        except httpx.TimeoutException:
            logger.warning("Financial news request timed out for %s", normalized)
            return StockNewsResult(results=[], success=False)
        except httpx.HTTPError as e:
            logger.warning("Financial news request failed for %s: %s", normalized, e)
            return StockNewsResult(results=[], success=False)

        source = f"{company_name} ({normalized})" if company_name else normalized
        results = parse_headline_feed(resp.text, source, max_items)
        return StockNewsResult(results=results, success=len(results) > 0)

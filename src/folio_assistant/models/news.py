from pydantic import BaseModel


class NewsResultItem(BaseModel):
    title: str
    link: str
    snippet: str = ""
    source: str = ""
    published_date: str | None = None


class StockNewsResult(BaseModel):
    results: list[NewsResultItem] = []
    success: bool = False


class NewsResponse(BaseModel):
    query: str
    results: list[NewsResultItem] = []
    total_results: int = 0


class SymbolNewsData(BaseModel):
    name: str
    news: NewsResponse


class WebNewsSearchResult(BaseModel):
    formatted_summary: str = ""
    search_results_by_symbol: dict[str, SymbolNewsData] = {}
    success: bool = True
    symbols_searched: list[str] = []

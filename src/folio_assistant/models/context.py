"""Structured context handed to the answer pipeline by upstream tools."""

from pydantic import BaseModel

from folio_assistant.models.preferences import UserPreferences


class PortfolioHolding(BaseModel):
    symbol: str
    allocation_in_percentage: float = 0.0
    value_in_base_currency: float = 0.0
    data_source: str = "YAHOO"


class PortfolioAnalysis(BaseModel):
    holdings: list[PortfolioHolding] = []
    holdings_count: int = 0
    total_value_in_base_currency: float = 0.0
    allocation_sum: float = 0.0


class RiskAssessment(BaseModel):
    concentration_band: str
    hhi: float
    top_holding_allocation: float


class RebalanceHolding(BaseModel):
    symbol: str
    current_allocation: float
    reduction_needed: float | None = None


class RebalancePlan(BaseModel):
    max_allocation_target: float
    overweight_holdings: list[RebalanceHolding] = []
    underweight_holdings: list[RebalanceHolding] = []


class StressTest(BaseModel):
    shock_percentage: float
    estimated_drawdown_in_base_currency: float
    estimated_portfolio_value_after_shock: float
    long_exposure_in_base_currency: float = 0.0


class Quote(BaseModel):
    symbol: str
    market_price: float
    currency: str = "USD"
    market_state: str | None = None


class MarketData(BaseModel):
    quotes: list[Quote] = []
    symbols_requested: list[str] = []


class ToolCallRecord(BaseModel):
    tool: str
    status: str = "success"


class MemoryTurn(BaseModel):
    query: str
    answer: str
    timestamp: str = ""
    tool_calls: list[ToolCallRecord] = []


class ConversationMemory(BaseModel):
    turns: list[MemoryTurn] = []


class AnswerRequest(BaseModel):
    """Everything the answer pipeline may draw on for one query.

    Each structured field is optional; absent fields simply skip their
    fallback section.
    """

    query: str
    language_code: str = "en"
    user_currency: str = "USD"
    model: str | None = None
    memory: ConversationMemory = ConversationMemory()
    user_preferences: UserPreferences = UserPreferences()

    portfolio_analysis: PortfolioAnalysis | None = None
    risk_assessment: RiskAssessment | None = None
    rebalance_plan: RebalancePlan | None = None
    stress_test: StressTest | None = None
    market_data: MarketData | None = None
    asset_fundamentals_summary: str | None = None
    financial_news_summary: str | None = None
    additional_context_summaries: list[str] = []

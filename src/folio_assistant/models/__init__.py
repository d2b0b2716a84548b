from folio_assistant.models.context import (
    AnswerRequest,
    ConversationMemory,
    MarketData,
    MemoryTurn,
    PortfolioAnalysis,
    PortfolioHolding,
    Quote,
    RebalancePlan,
    RiskAssessment,
    StressTest,
)
from folio_assistant.models.preferences import (
    PreferenceUpdate,
    ResponseStyle,
    UserPreferences,
)
from folio_assistant.models.symbols import CacheEntry, LookupItem, ResolvedSymbol

__all__ = [
    "AnswerRequest",
    "CacheEntry",
    "ConversationMemory",
    "LookupItem",
    "MarketData",
    "MemoryTurn",
    "PortfolioAnalysis",
    "PortfolioHolding",
    "PreferenceUpdate",
    "Quote",
    "RebalancePlan",
    "ResolvedSymbol",
    "ResponseStyle",
    "RiskAssessment",
    "StressTest",
    "UserPreferences",
]

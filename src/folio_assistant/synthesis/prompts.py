"""Prompt templates and chat-message assembly for answer generation."""

import json

from folio_assistant.models.context import AnswerRequest
from folio_assistant.models.preferences import ResponseStyle
from folio_assistant.synthesis.intents import (
    is_fundamentals_query,
    is_news_query,
    is_recommendation_query,
)

SYSTEM_MESSAGE = "You are a neutral financial assistant."

GENERAL_PROMPT = """\
Answer the user's question using only the context provided.
Language: {language_code}. Reporting currency: {user_currency}.
Cite concrete numbers from the context when they are relevant.
{style_instruction}
Context:
{context}

Query: {query}"""

RECOMMENDATION_PROMPT = """\
Task: compose a portfolio recommendation with exactly two alternatives.
Language: {language_code}. Reporting currency: {user_currency}.
{style_instruction}
Recommendation context (JSON):
{recommendation_context}

Output structure:
Summary: one sentence on the main concentration issue.
Option 1 (new money first): direct new contributions without selling.
Option 2 (sell and rebalance): trim overweight positions and reallocate.
Assumptions: targets and constraints you relied on.
Risk notes: what could make each option fail.
Next questions: what you need from the user to refine the plan.

Query: {query}"""

FUNDAMENTALS_PROMPT = """\
Task: produce a detailed fundamentals analysis for the requested assets.
Language: {language_code}. Reporting currency: {user_currency}.
{style_instruction}
Fundamentals data:
{fundamentals}

Output sections (in order):
1. Snapshot
2. Drivers
3. Risks
4. Portfolio impact
5. Actionable next steps
6. Decision checklist (thesis horizon, downside limit, max position size)

Query: {query}"""

NEWS_PROMPT = """\
Task: produce a concise, information-dense market news brief.
Language: {language_code}. Reporting currency: {user_currency}.
{style_instruction}
News context:
{news}

Output sections (in order):
1. Headline recap (3-5 bullets)
2. Why it matters for the portfolio
3. Watch next

Query: {query}"""

STYLE_INSTRUCTIONS = {
    ResponseStyle.CONCISE: "Keep the answer to at most two sentences.",
    ResponseStyle.DETAILED: (
        "Be thorough: explain the reasoning behind each point and include "
        "supporting figures."
    ),
}


def _style_instruction(request: AnswerRequest) -> str:
    style = request.user_preferences.response_style
    return STYLE_INSTRUCTIONS.get(style, "") if style else ""


def build_context_block(request: AnswerRequest) -> str:
    parts: list[str] = []
    if request.portfolio_analysis:
        parts.append(
            "Portfolio (JSON): "
            + request.portfolio_analysis.model_dump_json(exclude_none=True)
        )
    if request.risk_assessment:
        parts.append(
            "Risk assessment (JSON): "
            + request.risk_assessment.model_dump_json(exclude_none=True)
        )
    if request.rebalance_plan:
        parts.append(
            "Rebalance plan (JSON): "
            + request.rebalance_plan.model_dump_json(exclude_none=True)
        )
    if request.stress_test:
        parts.append(
            "Stress test (JSON): " + request.stress_test.model_dump_json(exclude_none=True)
        )
    if request.market_data:
        parts.append(
            "Market data (JSON): " + request.market_data.model_dump_json(exclude_none=True)
        )
    if request.asset_fundamentals_summary:
        parts.append(request.asset_fundamentals_summary.strip())
    if request.financial_news_summary:
        parts.append(request.financial_news_summary.strip())
    parts.extend(s.strip() for s in request.additional_context_summaries if s.strip())
    return "\n".join(parts) if parts else "No structured portfolio context available."


def recommendation_context(request: AnswerRequest) -> str:
    payload: dict = {"userCurrency": request.user_currency}
    if request.portfolio_analysis:
        holdings = sorted(
            request.portfolio_analysis.holdings,
            key=lambda h: h.allocation_in_percentage,
            reverse=True,
        )
        payload["holdings"] = [
            {
                "symbol": h.symbol,
                "allocation": round(h.allocation_in_percentage, 4),
                "value": round(h.value_in_base_currency, 2),
            }
            for h in holdings
        ]
        payload["totalValue"] = request.portfolio_analysis.total_value_in_base_currency
    if request.risk_assessment:
        payload["risk"] = request.risk_assessment.model_dump()
    if request.rebalance_plan:
        payload["rebalancePlan"] = request.rebalance_plan.model_dump(exclude_none=True)
    return json.dumps(payload, indent=2)


def build_prompt(request: AnswerRequest) -> str:
    """Pick the template by intent: recommendation, fundamentals, news, general."""
    common = {
        "query": request.query,
        "language_code": request.language_code,
        "user_currency": request.user_currency,
        "style_instruction": _style_instruction(request),
    }

    if is_recommendation_query(request.query):
        return RECOMMENDATION_PROMPT.format(
            recommendation_context=recommendation_context(request), **common
        )
    if is_fundamentals_query(request.query):
        return FUNDAMENTALS_PROMPT.format(
            fundamentals=(request.asset_fundamentals_summary or "").strip()
            or "No fundamentals data available.",
            **common,
        )
    if is_news_query(request.query):
        return NEWS_PROMPT.format(
            news=(request.financial_news_summary or "").strip()
            or "No recent headlines available.",
            **common,
        )
    return GENERAL_PROMPT.format(context=build_context_block(request), **common)


def build_messages(request: AnswerRequest, prompt: str) -> list[dict[str, str]]:
    """System message, then memory as user/assistant pairs, then the prompt."""
    messages = [{"role": "system", "content": SYSTEM_MESSAGE}]
    for turn in request.memory.turns:
        messages.append({"role": "user", "content": turn.query})
        messages.append({"role": "assistant", "content": turn.answer})
    messages.append({"role": "user", "content": prompt})
    return messages

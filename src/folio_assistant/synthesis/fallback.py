"""Deterministic fallback answers composed from structured context.

Sections are independent ``(predicate, render)`` pairs evaluated in a fixed
order. A section whose data is missing or malformed is skipped without
affecting the others.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from folio_assistant.analysis.news_aggregator import build_news_brief
from folio_assistant.models.context import AnswerRequest, PortfolioHolding
from folio_assistant.models.preferences import ResponseStyle
from folio_assistant.output.formatters import fmt_money, fmt_pct, fmt_price
from folio_assistant.synthesis.intents import (
    is_fundamentals_query,
    is_news_query,
    is_recommendation_query,
)

logger = logging.getLogger(__name__)

GENERIC_GUIDANCE = (
    "Portfolio context is available. Ask about holdings, risk concentration, "
    "or symbol prices for deeper analysis."
)
DEFAULT_MAX_POSITION_TARGET = 0.35
MAX_ALLOCATION_LINES = 5
MAX_SNAPSHOT_QUOTES = 5
CONCISE_MAX_LINES = 2

DECISION_CHECKLIST = (
    "Decision checklist:\n"
    "- Confirm the thesis horizon before adding exposure.\n"
    "- Set a downside threshold that triggers a review.\n"
    "- Cap the position size inside your concentration limit."
)
NEXT_QUESTIONS = (
    "Next questions:\n"
    "- Will you add new money, or rebalance with existing holdings?\n"
    "- What maximum single-position weight fits your risk budget?\n"
    "- Should tax impact limit how much you sell?"
)
DIAGNOSTIC_LINE_PATTERNS = (re.compile(r"^\s*session memory applied", re.IGNORECASE),)


@dataclass(frozen=True)
class FallbackSection:
    name: str
    predicate: Callable[[AnswerRequest], bool]
    render: Callable[[AnswerRequest], str | None]


def _long_holdings(request: AnswerRequest) -> list[PortfolioHolding]:
    if not request.portfolio_analysis:
        return []
    holdings = [
        h for h in request.portfolio_analysis.holdings if h.allocation_in_percentage > 0
    ]
    return sorted(holdings, key=lambda h: h.allocation_in_percentage, reverse=True)


def _news_active(request: AnswerRequest) -> bool:
    return bool(
        (request.financial_news_summary or "").strip()
        and is_news_query(request.query)
    )


def _quote_snapshot(request: AnswerRequest, sep: str) -> list[str]:
    if not request.market_data:
        return []
    return [
        f"{q.symbol}{sep}{fmt_price(q.market_price, q.currency)}"
        for q in request.market_data.quotes[:MAX_SNAPSHOT_QUOTES]
    ]


# --- portfolio ---


def _has_portfolio(request: AnswerRequest) -> bool:
    return bool(_long_holdings(request))


def _render_portfolio(request: AnswerRequest) -> str | None:
    lines = ["Largest long allocations:"]
    for h in _long_holdings(request)[:MAX_ALLOCATION_LINES]:
        value = fmt_money(h.value_in_base_currency, request.user_currency)
        lines.append(f"- {h.symbol}: {fmt_pct(h.allocation_in_percentage)} ({value})")
    return "\n".join(lines)


# --- recommendation ---


def _wants_recommendation(request: AnswerRequest) -> bool:
    return request.risk_assessment is not None or is_recommendation_query(request.query)


def _render_recommendation(request: AnswerRequest) -> str | None:
    target = DEFAULT_MAX_POSITION_TARGET
    if request.rebalance_plan:
        target = request.rebalance_plan.max_allocation_target

    holdings = _long_holdings(request)
    top = holdings[0] if holdings else None
    top_allocation = top.allocation_in_percentage if top else None
    if top_allocation is None and request.risk_assessment:
        top_allocation = request.risk_assessment.top_holding_allocation

    if top:
        others = [h.symbol for h in holdings[1:4]]
        destination = ", ".join(others) if others else "a broad index fund"
        option_one = (
            f"Option 1 (new money first): route new contributions to {destination} "
            f"instead of {top.symbol} ({fmt_pct(top_allocation, 1)}) until it drifts "
            f"below {fmt_pct(target, 1)}; no sales required."
        )
        reduction = max(0.0, top_allocation - target)
        total = request.portfolio_analysis.total_value_in_base_currency
        if reduction > 0:
            option_two = (
                f"Option 2 (sell and rebalance): trim {top.symbol} by about "
                f"{fmt_pct(reduction, 1)} of the portfolio "
                f"(~{fmt_money(reduction * total, request.user_currency)}) and "
                f"reallocate the proceeds across underweight holdings."
            )
        else:
            option_two = (
                f"Option 2 (sell and rebalance): {top.symbol} is already within the "
                f"{fmt_pct(target, 1)} target; rebalance only if drift exceeds it."
            )
    else:
        option_one = (
            "Option 1 (new money first): direct new contributions to "
            "under-represented holdings or a broad index fund until no single "
            f"position exceeds {fmt_pct(target, 1)}."
        )
        option_two = (
            "Option 2 (sell and rebalance): trim the largest position toward "
            f"{fmt_pct(target, 1)} and reallocate the proceeds across underweight "
            "holdings."
        )

    blocks = [
        option_one,
        option_two,
        "Assumptions:\n"
        f"- Maximum single-position target: {fmt_pct(target, 1)}.\n"
        "- Long-only holdings; taxes and trading costs are not modelled.\n"
        "- Allocations reflect the latest portfolio snapshot.",
    ]
    if request.risk_assessment:
        risk = request.risk_assessment
        blocks.append(
            "Risk notes:\n"
            f"- Concentration band: {risk.concentration_band} "
            f"(HHI {risk.hhi:.2f}).\n"
            f"- Top holding weight: {fmt_pct(risk.top_holding_allocation, 1)}."
        )
    blocks.append(NEXT_QUESTIONS)
    return "\n".join(blocks)


# --- rebalance / stress ---


def _has_rebalance(request: AnswerRequest) -> bool:
    return request.rebalance_plan is not None


def _render_rebalance(request: AnswerRequest) -> str | None:
    plan = request.rebalance_plan
    lines = [f"Rebalance priority (target max {fmt_pct(plan.max_allocation_target, 1)}):"]
    for h in plan.overweight_holdings:
        line = f"- Reduce {h.symbol} from {fmt_pct(h.current_allocation, 1)}"
        if h.reduction_needed:
            line += f" by {fmt_pct(h.reduction_needed, 1)}"
        lines.append(line + ".")
    for h in plan.underweight_holdings:
        lines.append(f"- Add to {h.symbol} (currently {fmt_pct(h.current_allocation, 1)}).")
    if len(lines) == 1:
        lines.append("- No holdings exceed the target.")
    return "\n".join(lines)


def _has_stress(request: AnswerRequest) -> bool:
    return request.stress_test is not None


def _render_stress(request: AnswerRequest) -> str | None:
    stress = request.stress_test
    shock = f"{round(stress.shock_percentage * 100, 1):g}%"
    drawdown = fmt_money(stress.estimated_drawdown_in_base_currency, request.user_currency)
    after = fmt_money(stress.estimated_portfolio_value_after_shock, request.user_currency)
    return (
        f"Stress test ({shock} downside): estimated drawdown {drawdown}; "
        f"portfolio after shock {after}."
    )


# --- market ---


def _has_market(request: AnswerRequest) -> bool:
    data = request.market_data
    return data is not None and bool(data.quotes or data.symbols_requested)


def _render_market(request: AnswerRequest) -> str | None:
    data = request.market_data
    lines: list[str] = []
    # quotes are folded into the news brief when one is rendered
    if not _news_active(request):
        snapshot = _quote_snapshot(request, ": ")
        if snapshot:
            lines.append(f"Market snapshot: {', '.join(snapshot)}")

    covered = {q.symbol.upper() for q in data.quotes}
    requested = dict.fromkeys(s.strip().upper() for s in data.symbols_requested if s.strip())
    missing = [s for s in requested if s not in covered]
    if missing:
        lines.append(
            "Market data request completed with limited quote coverage for: "
            f"{', '.join(missing)}."
        )
    return "\n".join(lines) or None


# --- fundamentals / news / additional ---


def _has_fundamentals(request: AnswerRequest) -> bool:
    return bool((request.asset_fundamentals_summary or "").strip()) and is_fundamentals_query(
        request.query
    )


def _render_fundamentals(request: AnswerRequest) -> str | None:
    return f"{request.asset_fundamentals_summary.strip()}\n{DECISION_CHECKLIST}"


def _render_news(request: AnswerRequest) -> str | None:
    summary = request.financial_news_summary.strip()
    snapshot = _quote_snapshot(request, " ")
    market_line = f"Market snapshot: {', '.join(snapshot)}." if snapshot else None
    return build_news_brief(summary, market_snapshot=market_line) or summary


def _has_additional(request: AnswerRequest) -> bool:
    return any(s.strip() for s in request.additional_context_summaries)


def _render_additional(request: AnswerRequest) -> str | None:
    return "\n".join(s.strip() for s in request.additional_context_summaries if s.strip())


FALLBACK_SECTIONS: tuple[FallbackSection, ...] = (
    FallbackSection("portfolio", _has_portfolio, _render_portfolio),
    FallbackSection("recommendation", _wants_recommendation, _render_recommendation),
    FallbackSection("rebalance", _has_rebalance, _render_rebalance),
    FallbackSection("stress", _has_stress, _render_stress),
    FallbackSection("market", _has_market, _render_market),
    FallbackSection("fundamentals", _has_fundamentals, _render_fundamentals),
    FallbackSection("news", _news_active, _render_news),
    FallbackSection("additional", _has_additional, _render_additional),
)


def _is_diagnostic(line: str) -> bool:
    return any(p.search(line) for p in DIAGNOSTIC_LINE_PATTERNS)


def apply_response_style(text: str, style: ResponseStyle | None) -> str:
    """Drop diagnostic lines; concise style keeps at most two non-empty lines."""
    lines = [line for line in text.splitlines() if not _is_diagnostic(line)]
    if style == ResponseStyle.CONCISE:
        lines = [line for line in lines if line.strip()][:CONCISE_MAX_LINES]
    return "\n".join(lines).strip() or GENERIC_GUIDANCE


def compose_sections(request: AnswerRequest) -> list[str]:
    rendered: list[str] = []
    for section in FALLBACK_SECTIONS:
        try:
            if not section.predicate(request):
                continue
            text = section.render(request)
        except Exception as e:
            logger.warning("Fallback section %s skipped: %s", section.name, e)
            continue
        if text and text.strip():
            rendered.append(text.strip())
    return rendered


def compose_fallback(request: AnswerRequest) -> str:
    sections = compose_sections(request)
    if not sections:
        sections = [GENERIC_GUIDANCE]
    return apply_response_style(
        "\n\n".join(sections), request.user_preferences.response_style
    )

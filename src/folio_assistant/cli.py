import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from folio_assistant.analysis.news_aggregator import search_web_news_for_symbols
from folio_assistant.analysis.preferences import (
    create_preference_summary_response,
    get_user_preferences,
    is_preference_recall_query,
    resolve_preference_update,
    save_user_preferences,
)
from folio_assistant.analysis.symbol_resolver import SymbolResolver
from folio_assistant.config import AssistantConfig
from folio_assistant.data.bounded_cache import BoundedCache
from folio_assistant.data.cache_provider import (
    CacheProvider,
    InMemoryCacheProvider,
    RedisCacheProvider,
)
from folio_assistant.data.news_client import StockNewsClient
from folio_assistant.data.search_provider import YFinanceSearchProvider
from folio_assistant.models.context import AnswerRequest
from folio_assistant.output.formatters import confidence_bar, confidence_color
from folio_assistant.synthesis.generation import AnthropicTextGenerator
from folio_assistant.synthesis.intents import is_news_query
from folio_assistant.synthesis.pipeline import build_answer, resolve_symbols

logger = logging.getLogger(__name__)
console = Console()

COMMANDS = ("ask", "resolve", "news", "clear-cache")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="folio",
        description="Portfolio assistant: answers, symbol resolution and news",
    )
    sub = p.add_subparsers(dest="command")

    # --- ask ---
    ask = sub.add_parser("ask", help="Answer a question about a portfolio")
    ask.add_argument("query", help="Question to answer")
    ask.add_argument(
        "--context",
        type=Path,
        default=None,
        help="JSON file with structured context (portfolio_analysis, market_data, ...)",
    )
    ask.add_argument("--user-id", default="local", help="Key for saved preferences")
    ask.add_argument("--model", default=None, help="Override the generation model")
    ask.add_argument(
        "--no-redis",
        action="store_true",
        help="Keep caches in process memory instead of Redis",
    )

    # --- resolve ---
    resolve = sub.add_parser("resolve", help="Resolve company mentions to tickers")
    resolve.add_argument("query", help="Free text mentioning companies or funds")
    resolve.add_argument("--no-redis", action="store_true")

    # --- news ---
    news = sub.add_parser("news", help="Recent headlines for symbols")
    news.add_argument("symbols", nargs="+", help="Ticker symbols")
    news.add_argument("--max-items", type=int, default=5)

    # --- clear-cache ---
    clear = sub.add_parser(
        "clear-cache", help="Drop cached symbol lookups and saved preferences"
    )
    clear.add_argument("--no-redis", action="store_true")

    for sp in (ask, resolve, news, clear):
        sp.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Enable verbose logging",
        )
    return p


def make_cache_provider(config: AssistantConfig, no_redis: bool) -> CacheProvider:
    if no_redis:
        return InMemoryCacheProvider()
    return RedisCacheProvider(config.redis_url)


async def _close(cache: CacheProvider) -> None:
    if isinstance(cache, RedisCacheProvider):
        await cache.close()


def load_context(path: Path | None) -> dict:
    if path is None:
        return {}
    raw = json.loads(path.read_text())
    if not isinstance(raw, dict):
        raise ValueError(f"Context file must hold a JSON object: {path}")
    return raw


async def run_ask(args: argparse.Namespace, config: AssistantConfig) -> str:
    cache = make_cache_provider(config, args.no_redis)
    try:
        prefs = await get_user_preferences(args.user_id, cache)

        update = resolve_preference_update(args.query, prefs)
        if update.should_persist:
            await save_user_preferences(
                args.user_id,
                update.user_preferences,
                cache,
                config.preference_ttl_seconds,
            )
        if update.acknowledgement:
            return update.acknowledgement
        if is_preference_recall_query(args.query):
            return create_preference_summary_response(update.user_preferences)

        request = AnswerRequest.model_validate(
            {
                **load_context(args.context),
                "query": args.query,
                "model": args.model,
                "user_preferences": update.user_preferences,
            }
        )

        if is_news_query(request.query) and not request.financial_news_summary:
            symbols = resolve_symbols(request.query, request.portfolio_analysis)
            if symbols:
                with console.status("[cyan]Fetching headlines..."):
                    news = await search_web_news_for_symbols(
                        symbols,
                        StockNewsClient(config.news_fetch_timeout_ms),
                        YFinanceSearchProvider(),
                        max_items_per_symbol=config.news_items_per_symbol,
                        max_symbols=config.news_max_symbols,
                    )
                if news.success:
                    request = request.model_copy(
                        update={"financial_news_summary": news.formatted_summary}
                    )

        generator = AnthropicTextGenerator(
            config.anthropic_api_key, config.llm_model, config.llm_max_tokens
        )
        with console.status("[cyan]Composing answer..."):
            return await build_answer(request, generator)
    finally:
        await _close(cache)


async def run_resolve(args: argparse.Namespace, config: AssistantConfig) -> list[str]:
    cache = make_cache_provider(config, args.no_redis)
    resolver = SymbolResolver(
        YFinanceSearchProvider(),
        cache,
        memory_cache=BoundedCache(config.symbol_cache_size),
        ttl_seconds=config.symbol_cache_ttl_seconds,
    )
    try:
        with console.status("[cyan]Resolving symbols..."):
            symbols = await resolver.extract_symbols_from_query(args.query)
            resolved = await resolver.resolve(resolver.extract_potential_entities(args.query))
    finally:
        await _close(cache)

    table = Table(title="Resolved entities")
    table.add_column("Symbol", style="bold")
    table.add_column("Name")
    table.add_column("Confidence")
    table.add_column("Cached")
    for r in resolved:
        color = confidence_color(r.confidence)
        table.add_row(
            r.symbol,
            r.name,
            f"[{color}]{confidence_bar(r.confidence)} {r.confidence:.2f}[/{color}]",
            "yes" if r.cached else "no",
        )
    if resolved:
        console.print(table)
    return symbols


async def run_news(args: argparse.Namespace, config: AssistantConfig) -> str:
    with console.status("[cyan]Fetching headlines..."):
        result = await search_web_news_for_symbols(
            args.symbols,
            StockNewsClient(config.news_fetch_timeout_ms),
            YFinanceSearchProvider(),
            max_items_per_symbol=args.max_items,
            max_symbols=config.news_max_symbols,
        )
    return result.formatted_summary


async def run_clear_cache(args: argparse.Namespace, config: AssistantConfig) -> str:
    cache = make_cache_provider(config, args.no_redis)
    try:
        await cache.clear()
    finally:
        await _close(cache)
    logger.info("Cache cleared")
    return "Cleared cached symbol lookups and saved preferences."


def main() -> None:
    parser = build_parser()

    # A bare question is treated as `ask`
    if len(sys.argv) > 1 and sys.argv[1] not in (*COMMANDS, "-h", "--help"):
        sys.argv.insert(1, "ask")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    from dotenv import load_dotenv

    load_dotenv()
    config = AssistantConfig.from_env()

    try:
        if args.command == "ask":
            console.print(asyncio.run(run_ask(args, config)), markup=False)
        elif args.command == "resolve":
            symbols = asyncio.run(run_resolve(args, config))
            console.print(
                f"[green]Symbols:[/green] {', '.join(symbols) if symbols else 'none'}"
            )
        elif args.command == "news":
            console.print(asyncio.run(run_news(args, config)), markup=False)
        elif args.command == "clear-cache":
            console.print(f"[green]{asyncio.run(run_clear_cache(args, config))}[/green]")
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()

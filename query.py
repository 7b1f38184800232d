#!/usr/bin/env python3
"""Ad hoc search runner for the Recipe Search Engine.

Run searches directly from the terminal.

Usage:
    python query.py "chicken curry"
    python query.py --pages 3 "pasta"                       # Accumulate three pages
    python query.py --filter maxReadyTime=30 --filter diet=vegan "soup"
    python query.py --filter cuisine=thai ""                # Filters only
    python query.py "quick healthy dinner for two"          # Natural-language search
    python query.py --debug "pasta"                         # Show full JSON state
    python query.py --favorites                             # List saved favourites

Features:
- Keyword vs natural-language mode picked by the query classifier
- "Load more" accumulation across pages
- Favourite flags when FAVORITES_API_URL is configured
- Favourites list with full details loaded in one informationBulk call
"""

import asyncio
import json
import sys
from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table

from src.models.models import Recipe
from src.providers.ai_search import GeminiSearchProvider
from src.providers.favorites import FavoritesClient
from src.providers.spoonacular import SpoonacularClient
from src.search.coordinator import FAVOURITES_TAB, parse_provider_response
from src.search.engine import RecipeSearchEngine
from src.utils.config import config
from src.utils.logger import logger

console = Console()

USAGE = 'Usage: python query.py [--debug] [--favorites] [--pages N] [--filter KEY=VALUE ...] "<your query>"'


def console_notifier(level: str, message: str) -> None:
    """Print user notifications the way the UI would toast them."""
    style = {"error": "red", "warning": "yellow"}.get(level, "cyan")
    console.print(f"[{style}]● {message}[/{style}]")


def build_engine() -> RecipeSearchEngine:
    """Wire providers from configuration. Natural-language search and favourites are optional."""
    spoonacular = SpoonacularClient.from_config()

    ai_provider: Optional[GeminiSearchProvider] = None
    if config.GEMINI_API_KEY:
        ai_provider = GeminiSearchProvider(spoonacular)
    else:
        logger.info("GEMINI_API_KEY not set, natural-language queries fall back to keyword search")

    favorites = FavoritesClient() if config.FAVORITES_API_URL else None
    return RecipeSearchEngine(spoonacular, ai_provider, favorites, notifier=console_notifier)


def render_table(title: str, rows: Iterable[tuple[Recipe, bool]]) -> None:
    table = Table(title=title)
    table.add_column("★", justify="center")
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Ready in", justify="right")
    for recipe, is_favorite in rows:
        ready = f"{recipe.ready_in_minutes} min" if recipe.ready_in_minutes is not None else "-"
        table.add_row("★" if is_favorite else "", str(recipe.id), recipe.title, ready)
    console.print(table)


def print_debug(title: str, payload_json: str) -> None:
    console.print(f"[bold cyan]Debug Mode: {title}[/bold cyan]")
    console.print("[dim]" + "=" * 60 + "[/dim]")
    console.print_json(payload_json)
    console.print("[dim]" + "=" * 60 + "[/dim]")
    console.print()


async def run_search(query: str, filters: dict[str, str], pages: int = 1, debug: bool = False) -> None:
    engine = build_engine()
    engine.set_filters(filters)
    engine.set_query(query)

    logger.info(f"Running {engine.mode.value} search: {query!r} filters={engine.filters.as_dict()}")
    await asyncio.gather(engine.load_favorites(), engine.search())
    for _ in range(pages - 1):
        if not engine.state.has_more:
            break
        await engine.load_more()

    state = engine.state
    console.print()

    if debug:
        print_debug("Accumulated State", state.model_dump_json(by_alias=True))

    if not state.items:
        console.print("[yellow]No recipes found[/yellow]")
        return

    title = "AI search results" if state.ai_optimized else f"Results (page {state.last_page})"
    render_table(f"{title}: {len(state.items)} of {state.total_results}", engine.results())


async def run_favorites(debug: bool = False) -> None:
    """List the user's favourites with full recipe details."""
    engine = build_engine()
    engine.select_tab(FAVOURITES_TAB)
    if engine.favorites.provider is None:
        console.print("[yellow]FAVORITES_API_URL is not set[/yellow]")
        return

    favorite_ids = await engine.load_favorites()
    console.print()
    if not favorite_ids:
        console.print("[yellow]No favourite recipes[/yellow]")
        return

    # Favourites endpoint entries can be sparse (ids only), so details come from informationBulk
    spoonacular = engine.coordinator.keyword_provider
    details = await spoonacular.get_recipes_by_ids(sorted(favorite_ids))
    recipes = parse_provider_response({"results": details}).items

    if debug:
        print_debug("Favourite Details", json.dumps(details))

    render_table(f"Favourites: {len(recipes)}", ((recipe, True) for recipe in recipes))


def parse_args(argv: list[str]) -> tuple[str, dict[str, str], int, bool, bool]:
    debug_mode = False
    favorites_mode = False
    pages = 1
    filters: dict[str, str] = {}
    index = 0

    while index < len(argv) and argv[index].startswith("--"):
        flag = argv[index]
        if flag == "--debug":
            debug_mode = True
            index += 1
        elif flag == "--favorites":
            favorites_mode = True
            index += 1
        elif flag in ("--pages", "--filter"):
            if index + 1 >= len(argv):
                raise ValueError(f"{flag} flag requires a value")
            value = argv[index + 1]
            if flag == "--pages":
                pages = int(value)
                if pages < 1:
                    raise ValueError("--pages must be at least 1")
            else:
                key, sep, filter_value = value.partition("=")
                if not sep:
                    raise ValueError(f"--filter expects KEY=VALUE, got: {value}")
                filters[key.strip()] = filter_value.strip()
            index += 2
        else:
            raise ValueError(f"Unknown flag: {flag}")

    # Join all arguments after flags as the query (handles queries with spaces)
    query = " ".join(argv[index:])
    return query, filters, pages, debug_mode, favorites_mode


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        print("")
        print("Examples:")
        print('  python query.py "chicken curry"')
        print('  python query.py --pages 2 "chicken curry"')
        print('  python query.py --filter maxReadyTime=30 "pasta"')
        print('  python query.py "pasta with tomatoes for 2"')
        print('  python query.py --favorites')
        sys.exit(1)

    try:
        query, filters, pages, debug_mode, favorites_mode = parse_args(sys.argv[1:])
    except ValueError as e:
        print(f"Error: {e}")
        print(USAGE)
        sys.exit(1)

    if not favorites_mode and not query.strip() and not filters:
        print("Error: No query or filters provided")
        print(USAGE)
        sys.exit(1)

    try:
        if favorites_mode:
            asyncio.run(run_favorites(debug=debug_mode))
        else:
            asyncio.run(run_search(query, filters, pages=pages, debug=debug_mode))
    except KeyboardInterrupt:
        logger.info("\nSearch interrupted by user.")
        sys.exit(0)
    except ValueError as e:
        # Missing API keys or invalid filters
        logger.error(f"Search setup failed: {e}")
        sys.exit(1)

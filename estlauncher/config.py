"""
Est Launcher - Wiring and command-line entry point.

Builds the suggestion and catalog services from settings and registers
the search handlers on a QueryRouter. A host UI calls route() on every
keystroke and renders the returned rows.

Usage:
  est-launcher "@wiki python"
  est-launcher --settings ./settings.toml "rust book"
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from estlauncher.search.handlers import EstSearchHandler, MentionHandler
from estlauncher.search.router import QueryRouter
from estlauncher.services.catalog import EngineCatalogService
from estlauncher.services.suggestions import SuggestionService
from estlauncher.utils.helpers import load_settings


def create_router(settings: Optional[Dict[str, Any]] = None) -> QueryRouter:
    """
    Create a router with the Est handlers registered.

    Args:
        settings: Settings dict (load_settings() is used when None)

    Returns:
        QueryRouter with MentionHandler and EstSearchHandler
    """
    settings = settings or load_settings()
    endpoint = settings["est"]["endpoint"]
    suggestion_cfg = settings["suggestions"]
    engine_cfg = settings["engines"]

    suggestions = None
    if suggestion_cfg["enabled"]:
        suggestions = SuggestionService(
            client=httpx.Client(timeout=suggestion_cfg["timeout"]),
            max_workers=suggestion_cfg["max_workers"],
        )

    catalog = EngineCatalogService(
        endpoint,
        timeout=engine_cfg["timeout"],
        fuzzy_threshold=engine_cfg["fuzzy_threshold"],
    )

    router = QueryRouter()
    router.register(MentionHandler(
        catalog,
        suggestions=suggestions,
        max_completions=engine_cfg["max_completions"],
    ))
    router.register(EstSearchHandler(endpoint, suggestions=suggestions))
    logger.debug(f"Est launcher router created for {endpoint}")
    return router


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="est-launcher", description="Interpret an Est query")
    parser.add_argument("query", nargs="?", default="", help="Text as typed in the launcher")
    parser.add_argument("--settings", type=Path, default=None, help="Path to settings.toml")
    parser.add_argument("--wait", type=float, default=1.5, help="Seconds to wait for suggestions and engines")
    args = parser.parse_args(argv)

    router = create_router(load_settings(args.settings))
    try:
        handler_name, results = router.route(args.query)

        # Suggestions and the engine catalog land in the background
        if args.query.strip() and args.wait > 0:
            time.sleep(args.wait)
            handler_name, results = router.reroute()
    finally:
        router.close()

    print(f"[{handler_name}]")
    for item in results:
        line = f"  {item.result_type:<11} {item.title}"
        if item.url:
            line += f"  →  {item.url}"
        print(line)

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Mention Handler - Complete @mentions from the Est engine catalog.

Triggers while the user is still typing the mention itself ("@", "@wi",
"@gh.is"), before any whitespace. Shows the mention being used and the
catalog engines it could complete to, shortest ids first.

Only cached catalog data is shown; a missing catalog or description is
fetched in the background and appears on a later keystroke.
"""

import re
from typing import Optional

from loguru import logger

from estlauncher.search.query import parse_query
from estlauncher.search.router import ResultItem
from estlauncher.services.catalog import EngineCatalogService
from estlauncher.services.suggestions import SuggestionService

PARTIAL_MENTION = re.compile(r"@[A-Za-z0-9_.]*")


class MentionHandler:
    """List catalog engines matching a partially typed mention."""

    name = "mentions"
    priority = 100

    def __init__(
        self,
        catalog: EngineCatalogService,
        suggestions: Optional[SuggestionService] = None,
        max_completions: int = 12,
    ):
        self.catalog = catalog
        self.suggestions = suggestions
        self.max_completions = max_completions

    def matches(self, query: str) -> bool:
        return PARTIAL_MENTION.fullmatch(query) is not None

    def get_results(self, query: str) -> list[ResultItem]:
        parsed = parse_query(query)
        partial = parsed.mention_string

        if self.suggestions is not None:
            # Nothing to suggest until there is content
            self.suggestions.request("")

        results = []
        if partial:
            described = self.catalog.cached_description(partial) if partial in self.catalog.engines else None
            results.append(ResultItem(
                title=f"Using {parsed.mention_prefix}",
                description=(described.description or "") if described else "",
                icon="system-search",
                result_type="mention",
                tags=parsed.mention_segments,
            ))

        for engine_id in self.catalog.complete_mention(partial, limit=self.max_completions):
            if engine_id == partial:
                continue
            results.append(ResultItem(
                title=f"@{engine_id}",
                icon="system-search",
                result_type="engine",
            ))

        if not results:
            logger.debug(f"No engines match '@{partial}'")
        return results

    def close(self) -> None:
        self.catalog.close()

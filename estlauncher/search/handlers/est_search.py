"""
Est Search Handler - Search through an Est server with live suggestions.

Rows produced for the typed text:
  (nothing typed)      → "Open Est Web..." placeholder opening the endpoint
  @wiki                → "Using @wiki" (nothing to search yet)
  @wiki python         → direct search for the full text, then one row per
                         suggestion, each re-prefixed with "@wiki "

Suggestions are fetched in the background by SuggestionService; rows show
whatever result has been applied for the current content.
"""

from typing import Callable, Optional

from estlauncher.search.query import parse_query
from estlauncher.search.router import ResultItem
from estlauncher.search.urls import build_search_url, build_suggestion_url, fallback_url
from estlauncher.services.suggestions import SuggestionService
from estlauncher.utils.helpers import open_url

PLACEHOLDER_TITLE = "Open Est Web..."


class EstSearchHandler:
    """Direct Est search plus accepted-suggestion targets."""

    name = "est_search"
    priority = 1000

    def __init__(
        self,
        endpoint: str,
        suggestions: Optional[SuggestionService] = None,
        opener: Callable[[str], object] = open_url,
    ):
        self.endpoint = endpoint
        self.suggestions = suggestions
        self.opener = opener

    def matches(self, query: str) -> bool:
        return True

    def get_results(self, query: str) -> list[ResultItem]:
        if query == "":
            if self.suggestions is not None:
                self.suggestions.request("")
            return [self._placeholder()]

        parsed = parse_query(query)

        if self.suggestions is not None:
            self.suggestions.request(parsed.content)

        if not parsed.content:
            return [ResultItem(
                title=f"Using @{'.'.join(parsed.mention_segments)}",
                icon="system-search",
                result_type="mention",
                tags=[s for s in parsed.mention_segments if s],
            )]

        url = build_search_url(self.endpoint, query)
        results = [ResultItem(
            title=parsed.content,
            description=parsed.mention_prefix,
            icon="edit-find",
            result_type="direct",
            url=url,
            tags=[s for s in parsed.mention_segments if s],
            on_activate=lambda u=url: self.opener(u),
        )]

        results.extend(self._suggestion_rows(parsed.mention_string, parsed.content))
        return results

    def _suggestion_rows(self, mention_string: str, content: str) -> list[ResultItem]:
        """Rows for the applied suggestions, if they belong to content."""
        if self.suggestions is None or self.suggestions.current_content != content:
            return []

        result = self.suggestions.result
        provider = result.provider.value if result.provider else ""

        rows = []
        for suggestion in result.suggestions:
            url = build_suggestion_url(self.endpoint, mention_string, suggestion)
            rows.append(ResultItem(
                title=suggestion,
                description=f"Suggested by {provider}" if provider else "",
                icon="starred",
                result_type="suggestion",
                url=url,
                on_activate=lambda u=url: self.opener(u),
            ))
        return rows

    def _placeholder(self) -> ResultItem:
        url = fallback_url(self.endpoint)
        return ResultItem(
            title=PLACEHOLDER_TITLE,
            description=self.endpoint,
            icon="web-browser",
            result_type="placeholder",
            url=url,
            on_activate=lambda u=url: self.opener(u),
        )

    def close(self) -> None:
        if self.suggestions is not None:
            self.suggestions.shutdown()

"""
Query Router - Dispatches search text to priority-ordered handlers.

Each handler declares a priority (lower = higher priority) and a matches()
method. The router finds the first matching handler and returns its rows.
Est search is always the fallback (highest priority number).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Callable

FALLBACK_HANDLER = "est_search"


@dataclass
class ResultItem:
    """A single row shown by the host UI."""
    title: str
    description: str = ""
    icon: str = "web-browser"
    result_type: str = "direct"  # placeholder, direct, suggestion, mention, engine
    url: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    on_activate: Optional[Callable] = None


class SearchHandler(ABC):
    """Base class for all search handlers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Handler identifier."""
        ...

    @property
    @abstractmethod
    def priority(self) -> int:
        """Lower number = checked first. Est search should be ~1000."""
        ...

    @abstractmethod
    def matches(self, query: str) -> bool:
        """Return True if this handler should process the query."""
        ...

    @abstractmethod
    def get_results(self, query: str) -> list[ResultItem]:
        """Return rows for the query."""
        ...


class QueryRouter:
    """Routes queries to the appropriate handler based on priority."""

    def __init__(self):
        self._handlers: list[SearchHandler] = []
        self.last_query = ""

    @property
    def handlers(self) -> list[SearchHandler]:
        return list(self._handlers)

    def get(self, name: str) -> Optional[SearchHandler]:
        """Registered handler called name, if any."""
        return next((h for h in self._handlers if h.name == name), None)

    def register(self, handler: SearchHandler) -> None:
        """Register a handler and re-sort by priority."""
        self._handlers.append(handler)
        self._handlers.sort(key=lambda h: h.priority)

    def route(self, query: str) -> tuple[str, list[ResultItem]]:
        """
        Find the first matching handler and return its rows.

        Args:
            query: The raw search entry text

        Returns:
            Tuple of (handler_name, results_list).
            Returns ("none", []) if no handler matches.
        """
        self.last_query = query or ""

        if not query or not query.strip():
            # Empty query - let Est search show the placeholder
            fallback = self.get(FALLBACK_HANDLER)
            if fallback is None:
                return "none", []
            return fallback.name, fallback.get_results("")

        for handler in self._handlers:
            if handler.matches(query):
                return handler.name, handler.get_results(query)

        return "none", []

    def reroute(self) -> tuple[str, list[ResultItem]]:
        """Route the last query again, e.g. after background suggestions landed."""
        return self.route(self.last_query)

    def close(self) -> None:
        """Release handler resources (worker pools, HTTP clients)."""
        for handler in self._handlers:
            close = getattr(handler, "close", None)
            if close is not None:
                close()

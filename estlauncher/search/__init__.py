"""
Search package - Query parsing, URL composition and handler routing.

Queries are parsed into mention + content, then dispatched to
priority-ordered handlers (mention completion, Est search).
"""

from .query import ParsedQuery, parse_query
from .router import QueryRouter, SearchHandler, ResultItem
from .urls import build_search_url, build_suggestion_url, fallback_url

__all__ = [
    "ParsedQuery",
    "parse_query",
    "QueryRouter",
    "SearchHandler",
    "ResultItem",
    "build_search_url",
    "build_suggestion_url",
    "fallback_url",
]

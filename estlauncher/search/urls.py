"""
URL Composer - Build outbound Est search URLs.

Every target is "<endpoint>/search?q=<text>". Accepted suggestions get the
original mention re-attached ("@wiki python") so the Est server still
routes the search to the mentioned engine.
"""

import urllib.parse

SEARCH_PATH = "search"


def build_search_url(endpoint: str, text: str) -> str:
    """
    Resolve the search path against endpoint and set q to text verbatim.

    Any query string or fragment on the endpoint is dropped so the result
    carries exactly one parameter.
    """
    base = urllib.parse.urljoin(endpoint, SEARCH_PATH)
    parts = urllib.parse.urlsplit(base)
    query = urllib.parse.urlencode({"q": text})
    return urllib.parse.urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))


def compose_suggestion_query(mention_string: str, suggestion: str) -> str:
    if mention_string:
        return f"@{mention_string} {suggestion}"
    return suggestion


def build_suggestion_url(endpoint: str, mention_string: str, suggestion: str) -> str:
    """Search URL for an accepted suggestion, keeping the mention prefix."""
    return build_search_url(endpoint, compose_suggestion_query(mention_string, suggestion))


def fallback_url(endpoint: str) -> str:
    """Navigation target when nothing has been typed: the endpoint itself."""
    return endpoint

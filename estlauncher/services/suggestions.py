"""
Suggestion Service - Live autocomplete from Google or DuckDuckGo.

Provider selection is a plain prefix rule on the search content:
  ""            → no provider, no request
  "!..." "\\..." → DuckDuckGo (bang / escape syntax)
  anything else → Google

Both providers answer with a JSON array whose second element is the list
of suggestion strings. Each provider has its own normalizer so untyped
payloads never leak past this module.

Fetching is best-effort: every failure degrades to an empty list and is
only logged, never raised to the caller.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Union

import httpx
from loguru import logger

DEFAULT_TIMEOUT = 5.0


class ProviderChoice(Enum):
    GOOGLE = "Google"
    DUCKDUCKGO = "DuckDuckGo"


# Provider → (autocomplete URL, fixed request params)
PROVIDER_ENDPOINTS = {
    ProviderChoice.GOOGLE: ("https://www.google.com/complete/search", {"output": "firefox"}),
    ProviderChoice.DUCKDUCKGO: ("https://ac.duckduckgo.com/ac/", {"type": "list"}),
}

BANG_PREFIXES = ("!", "\\")


@dataclass(frozen=True)
class SuggestionResult:
    """Suggestions ready for display, tagged with the provider that produced them."""
    provider: Optional[ProviderChoice] = None
    suggestions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SuggestionsOk:
    suggestions: list[str]


@dataclass(frozen=True)
class SuggestionsFailed:
    reason: str


FetchOutcome = Union[SuggestionsOk, SuggestionsFailed]

EMPTY_RESULT = SuggestionResult()


def select_provider(content: str) -> Optional[ProviderChoice]:
    """Pick the autocomplete provider for content, or None when it is empty."""
    if not content:
        return None
    if content.startswith(BANG_PREFIXES):
        return ProviderChoice.DUCKDUCKGO
    return ProviderChoice.GOOGLE


def build_provider_request(provider: ProviderChoice, content: str) -> tuple[str, dict[str, str]]:
    """Return (url, params) for the provider's autocomplete endpoint."""
    url, fixed = PROVIDER_ENDPOINTS[provider]
    if provider is ProviderChoice.GOOGLE:
        params = {**fixed, "q": content}
    else:
        params = {"q": content, **fixed}
    return url, params


def _second_element_strings(payload: Any) -> list[str]:
    """Extract payload[1] as a list of strings, or [] for any other shape."""
    if not isinstance(payload, list) or len(payload) < 2:
        return []
    items = payload[1]
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, str)]


def normalize_google(payload: Any) -> list[str]:
    """Google firefox output: ["query", ["s1", "s2", ...], ...]."""
    return _second_element_strings(payload)


def normalize_duckduckgo(payload: Any) -> list[str]:
    """DuckDuckGo list output: ["query", ["s1", "s2", ...]]."""
    return _second_element_strings(payload)


NORMALIZERS: dict[ProviderChoice, Callable[[Any], list[str]]] = {
    ProviderChoice.GOOGLE: normalize_google,
    ProviderChoice.DUCKDUCKGO: normalize_duckduckgo,
}


def request_suggestions(
    provider: ProviderChoice,
    content: str,
    client: Optional[httpx.Client] = None,
) -> FetchOutcome:
    """
    Issue one autocomplete request and normalize the response.

    Args:
        provider: Which provider to ask
        content: Search content sent as the q parameter
        client: Optional shared httpx client (a short-lived one is used otherwise)

    Returns:
        SuggestionsOk with the ordered suggestions, or SuggestionsFailed
    """
    url, params = build_provider_request(provider, content)

    try:
        if client is None:
            response = httpx.get(url, params=params, timeout=DEFAULT_TIMEOUT)
        else:
            response = client.get(url, params=params)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPError as e:
        return SuggestionsFailed(reason=f"{provider.value} request failed: {e}")
    except ValueError as e:
        return SuggestionsFailed(reason=f"{provider.value} returned invalid JSON: {e}")

    return SuggestionsOk(suggestions=NORMALIZERS[provider](payload))


def fetch_suggestions(content: str, client: Optional[httpx.Client] = None) -> SuggestionResult:
    """
    Fetch suggestions for content from the selected provider.

    Empty content returns an empty result without touching the network.
    Failures are logged and mapped to an empty result.
    """
    provider = select_provider(content)
    if provider is None:
        return EMPTY_RESULT

    try:
        outcome = request_suggestions(provider, content, client)
    except Exception:
        logger.exception(f"Unexpected error fetching suggestions for '{content}'")
        return EMPTY_RESULT

    if isinstance(outcome, SuggestionsFailed):
        logger.debug(outcome.reason)
        return EMPTY_RESULT

    return SuggestionResult(provider=provider, suggestions=outcome.suggestions)


class SuggestionService:
    """
    Background suggestion fetching keyed by the content that triggered it.

    request(content) is called on every input change. Results arrive on a
    worker thread and are applied only if their content is still the
    current one and no newer request has already been applied.

    Listeners registered with connect() receive the applied SuggestionResult.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        max_workers: int = 2,
        fetcher: Callable[..., SuggestionResult] = fetch_suggestions,
    ):
        self.client = client
        self._fetcher = fetcher
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="suggestions")
        self._lock = threading.Lock()
        self._listeners: list[Callable[[SuggestionResult], None]] = []

        self._generation = 0          # Bumped on every request()
        self._applied_generation = 0  # Generation of the result currently shown
        self._current_content = ""
        self._in_flight: dict[str, Future] = {}
        self._result = EMPTY_RESULT

    @property
    def current_content(self) -> str:
        return self._current_content

    @property
    def result(self) -> SuggestionResult:
        """The last applied result (empty until a fetch for current content lands)."""
        return self._result

    def connect(self, callback: Callable[[SuggestionResult], None]) -> None:
        """Register a listener called whenever a new result is applied."""
        self._listeners.append(callback)

    def request(self, content: str) -> Optional[Future]:
        """
        Start fetching suggestions for content.

        Returns:
            The Future for the fetch, or None when content is empty
            (the result is cleared immediately in that case) or when the
            result for unchanged content has already been applied.
        """
        with self._lock:
            changed = content != self._current_content
            if content and not changed and content not in self._in_flight:
                return None

            self._generation += 1
            generation = self._generation
            self._current_content = content

            if not content:
                future = None
            elif content in self._in_flight:
                # Same content already being fetched, reuse it
                future = self._in_flight[content]
            else:
                future = self._executor.submit(self._fetcher, content, self.client)
                self._in_flight[content] = future

        if future is None:
            self._apply(generation, content, EMPTY_RESULT)
            return None

        if changed:
            # Don't keep showing suggestions for the previous content
            self._apply(generation, content, EMPTY_RESULT, notify=False)

        future.add_done_callback(lambda f: self._on_done(f, generation, content))
        return future

    def _on_done(self, future: Future, generation: int, content: str) -> None:
        with self._lock:
            if self._in_flight.get(content) is future:
                del self._in_flight[content]

        if future.cancelled():
            logger.debug(f"Suggestion fetch for '{content}' cancelled")
            return

        try:
            result = future.result()
        except Exception:
            logger.exception(f"Suggestion fetch crashed for '{content}'")
            result = EMPTY_RESULT

        self._apply(generation, content, result)

    def _apply(self, generation: int, content: str, result: SuggestionResult, notify: bool = True) -> bool:
        """Store result if it still matches the current content. Returns True if applied."""
        with self._lock:
            if content != self._current_content or generation < self._applied_generation:
                logger.debug(f"Discarding stale suggestions for '{content}'")
                return False
            self._applied_generation = generation
            self._result = result

        if notify:
            for callback in list(self._listeners):
                try:
                    callback(result)
                except Exception:
                    logger.exception("Suggestion listener failed")
        return True

    def shutdown(self) -> None:
        """Stop the worker pool without waiting for pending fetches and close the client."""
        self._executor.shutdown(wait=False, cancel_futures=True)
        if self.client is not None:
            self.client.close()

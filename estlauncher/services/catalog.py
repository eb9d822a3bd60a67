"""
Engine Catalog Service - Named engines available for @mention addressing.

Fetches the engine list from the Est server's experimental API:
  GET /api/experimental/engines           → {"engines": ["wiki", "gh", ...]}
  GET /api/experimental/description/{id}  → {"id": "...", "description": "..."}

Engines whose id ends with "_" are internal and never shown. The rest are
ordered shortest-first, since short ids are the easiest mentions to type.

Handlers only ever read the cache. Reading an empty cache starts a
background fetch; results are stored when they land and listeners are told
so the host can route the current text again.
"""

import threading
import urllib.parse
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import httpx
from loguru import logger
from rapidfuzz import fuzz, process

ENGINES_PATH = "api/experimental/engines"
DESCRIPTION_PATH = "api/experimental/description/"
INTERNAL_MARKER = "_"


@dataclass(frozen=True)
class EngineDescription:
    id: str
    description: Optional[str] = None


def filter_engines(ids: Iterable[str]) -> list[str]:
    """
    Drop empty and internal ids, then sort by length.

    sorted() is stable, so equal-length ids keep their catalog order.
    """
    visible = [engine_id for engine_id in ids if engine_id and not engine_id.endswith(INTERNAL_MARKER)]
    return sorted(visible, key=len)


class EngineCatalogService:
    """
    Fetch and cache the remote engine catalog.

    Methods:
        fetch_engines(): Fetch and filter the catalog (blocking, never raises)
        refresh(): Blocking re-fetch that updates the cache
        refresh_async(): Same, on the worker pool
        engines: Cached list, never blocks
        describe(engine_id): Blocking fetch of one engine's description
        cached_description(engine_id): Cached description, never blocks
        complete_mention(partial): Engines matching a partially typed mention
    """

    def __init__(
        self,
        endpoint: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
        fuzzy_threshold: int = 60,
        max_workers: int = 1,
    ):
        self.endpoint = endpoint
        self.client = client or httpx.Client(timeout=timeout)
        self.fuzzy_threshold = fuzzy_threshold
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="catalog")
        self._lock = threading.Lock()
        self._listeners: list[Callable[[list[str]], None]] = []

        self._engines: Optional[list[str]] = None  # None until a fetch succeeds
        self._engines_future: Optional[Future] = None
        self._descriptions: dict[str, EngineDescription] = {}
        self._description_futures: dict[str, Future] = {}

    def _url(self, path: str) -> str:
        return urllib.parse.urljoin(self.endpoint, path)

    def connect(self, callback: Callable[[list[str]], None]) -> None:
        """Register a listener called with the engine list after each successful fetch."""
        self._listeners.append(callback)

    def _request_engines(self) -> Optional[list[str]]:
        """One catalog request. Returns None on any failure (already logged)."""
        url = self._url(ENGINES_PATH)
        try:
            response = self.client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Error fetching engines: {e.response.status_code} {e.response.reason_phrase}"
            )
            return None
        except httpx.HTTPError as e:
            logger.error(f"Error fetching engines: {e}")
            return None
        except ValueError as e:
            logger.error(f"Error fetching engines: invalid JSON from {url}: {e}")
            return None

        engines = data.get("engines") if isinstance(data, dict) else None
        if not isinstance(engines, list):
            logger.warning(f"Engine catalog at {url} has no 'engines' list")
            return None

        return filter_engines(e for e in engines if isinstance(e, str))

    def fetch_engines(self) -> list[str]:
        """
        Fetch the catalog and return the filtered, ordered engine ids.

        Request errors and non-2xx responses are logged and yield [].
        """
        return self._request_engines() or []

    def refresh(self) -> list[str]:
        """
        Re-fetch the catalog and replace the cached list.

        A failed fetch leaves the cache as it was, so the next read of
        engines tries again.
        """
        engines = self._request_engines()
        if engines is None:
            return self._engines or []

        with self._lock:
            self._engines = engines
        logger.debug(f"Engine catalog refreshed: {len(engines)} engines")

        for callback in list(self._listeners):
            try:
                callback(engines)
            except Exception:
                logger.exception("Engine catalog listener failed")
        return engines

    def refresh_async(self) -> Future:
        """Start a background refresh, or return the one already running."""
        with self._lock:
            if self._engines_future is None or self._engines_future.done():
                self._engines_future = self._executor.submit(self.refresh)
            return self._engines_future

    @property
    def engines(self) -> list[str]:
        """Cached engine list; [] while the first fetch is still pending."""
        engines = self._engines
        if engines is None:
            self.refresh_async()
            return []
        return engines

    def describe(self, engine_id: str) -> Optional[EngineDescription]:
        """
        Fetch the description of one engine.

        Args:
            engine_id: Engine identifier (e.g., "wiki")

        Returns:
            EngineDescription, or None if the request fails
        """
        url = self._url(DESCRIPTION_PATH + urllib.parse.quote(engine_id, safe=""))
        try:
            response = self.client.get(url)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Could not describe engine '{engine_id}': {e}")
            return None

        if not isinstance(data, dict):
            return None

        description = data.get("description")
        return EngineDescription(
            id=data.get("id", engine_id),
            description=description if isinstance(description, str) else None,
        )

    def _load_description(self, engine_id: str) -> Optional[EngineDescription]:
        described = self.describe(engine_id)
        if described is not None:
            with self._lock:
                self._descriptions[engine_id] = described
        return described

    def describe_async(self, engine_id: str) -> Future:
        """
        Fetch a description on the worker pool.

        Reuses the running or successful fetch for engine_id; a failed one
        is retried.
        """
        with self._lock:
            future = self._description_futures.get(engine_id)
            if future is None or (future.done() and engine_id not in self._descriptions):
                future = self._executor.submit(self._load_description, engine_id)
                self._description_futures[engine_id] = future
            return future

    def cached_description(self, engine_id: str) -> Optional[EngineDescription]:
        """Description if already fetched, otherwise None and a background fetch."""
        with self._lock:
            described = self._descriptions.get(engine_id)
        if described is None:
            self.describe_async(engine_id)
        return described

    def complete_mention(self, partial: str, limit: int = 12) -> list[str]:
        """
        Engines completing a partially typed mention.

        Prefix matches come first in catalog order; fuzzy matches above
        fuzzy_threshold fill the remaining slots.
        """
        engines = self.engines
        if not partial:
            return engines[:limit]

        prefixed = [engine_id for engine_id in engines if engine_id.startswith(partial)]
        if len(prefixed) >= limit:
            return prefixed[:limit]

        others = [engine_id for engine_id in engines if engine_id not in prefixed]
        fuzzy = process.extract(
            partial,
            others,
            scorer=fuzz.WRatio,
            limit=limit - len(prefixed),
            score_cutoff=self.fuzzy_threshold,
        )
        # fuzzy: list of (matched_string, score, index)
        return prefixed + [matched for matched, _score, _index in fuzzy]

    def close(self) -> None:
        """Stop the worker pool and close the HTTP client."""
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.client.close()

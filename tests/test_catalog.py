"""
Tests for the engine list filter and the EngineCatalogService.

Uses httpx.MockTransport for the Est experimental API. Diagnostics are
captured with a temporary loguru sink.
"""

import threading

import httpx
import pytest
from loguru import logger

from estlauncher.services.catalog import EngineCatalogService, EngineDescription, filter_engines


@pytest.fixture
def log_messages():
    messages = []
    sink_id = logger.add(lambda m: messages.append(m.record), level="DEBUG")
    yield messages
    logger.remove(sink_id)


class TestFilterEngines:

    def test_drops_internal_and_empty_then_sorts(self):
        assert filter_engines(["a_", "", "bb", "c", "dddd"]) == ["c", "bb", "dddd"]

    def test_equal_lengths_keep_input_order(self):
        assert filter_engines(["zz", "aa", "b", "mm"]) == ["b", "zz", "aa", "mm"]

    def test_no_case_normalization_or_dedup(self):
        assert filter_engines(["Wiki", "wiki", "wiki"]) == ["Wiki", "wiki", "wiki"]

    def test_none_entries_dropped(self):
        assert filter_engines([None, "gh"]) == ["gh"]

    def test_underscore_only_inside_is_kept(self):
        assert filter_engines(["my_engine", "hidden_"]) == ["my_engine"]

    def test_empty_input(self):
        assert filter_engines([]) == []


class TestFetchEngines:

    def test_fetches_and_filters(self, mock_client, catalog_handler, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(catalog_handler))
        assert catalog.fetch_engines() == ["gh", "wiki", "google", "github", "wikipedia"]
        assert catalog_handler.seen == ["/api/experimental/engines"]

    def test_endpoint_without_trailing_slash(self, mock_client, catalog_handler):
        catalog = EngineCatalogService("https://est.example", client=mock_client(catalog_handler))
        assert "gh" in catalog.fetch_engines()

    def test_http_error_returns_empty_and_logs(self, mock_client, endpoint, log_messages):
        client = mock_client(lambda request: httpx.Response(502))
        catalog = EngineCatalogService(endpoint, client=client)
        assert catalog.fetch_engines() == []
        errors = [r for r in log_messages if r["level"].name == "ERROR"]
        assert errors and "502" in errors[0]["message"]

    def test_request_error_returns_empty_and_logs(self, mock_client, endpoint, log_messages):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        catalog = EngineCatalogService(endpoint, client=mock_client(handler))
        assert catalog.fetch_engines() == []
        assert any(r["level"].name == "ERROR" for r in log_messages)

    @pytest.mark.parametrize("body", ["not json", "[1, 2]", '{"engines": "wiki"}', "{}"])
    def test_malformed_catalog_returns_empty(self, mock_client, endpoint, body):
        client = mock_client(lambda request: httpx.Response(200, text=body))
        catalog = EngineCatalogService(endpoint, client=client)
        assert catalog.fetch_engines() == []

    def test_engines_property_never_blocks(self, mock_client, catalog_handler, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(catalog_handler))
        assert catalog.engines == []
        catalog.refresh_async().result(timeout=5)
        assert catalog.engines == ["gh", "wiki", "google", "github", "wikipedia"]
        catalog.close()

    def test_engines_property_caches(self, mock_client, catalog_handler, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(catalog_handler))
        catalog.refresh()
        first = catalog.engines
        second = catalog.engines
        assert first == second
        assert catalog_handler.seen.count("/api/experimental/engines") == 1

    def test_refresh_refetches(self, mock_client, catalog_handler, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(catalog_handler))
        catalog.refresh()
        catalog.refresh()
        assert catalog_handler.seen.count("/api/experimental/engines") == 2

    def test_failed_fetch_is_retried_on_next_read(self, mock_client, endpoint):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(503)
            return httpx.Response(200, json={"engines": ["gh"]})

        catalog = EngineCatalogService(endpoint, client=mock_client(handler))
        catalog.refresh_async().result(timeout=5)

        # Still nothing cached, so this read starts another fetch
        assert catalog.engines == []

        catalog.refresh_async().result(timeout=5)
        assert catalog.engines == ["gh"]
        catalog.close()

    def test_failed_refresh_keeps_previous_list(self, mock_client, endpoint):
        responses = [httpx.Response(200, json={"engines": ["gh"]}), httpx.Response(500)]
        catalog = EngineCatalogService(endpoint, client=mock_client(lambda request: responses.pop(0)))
        assert catalog.refresh() == ["gh"]
        assert catalog.refresh() == ["gh"]
        assert catalog.engines == ["gh"]

    def test_concurrent_reads_share_one_fetch(self, mock_client, endpoint):
        gate = threading.Event()
        seen = []

        def handler(request):
            seen.append(request.url.path)
            gate.wait(timeout=5)
            return httpx.Response(200, json={"engines": ["gh"]})

        catalog = EngineCatalogService(endpoint, client=mock_client(handler))
        try:
            assert catalog.engines == []
            assert catalog.engines == []
            future = catalog.refresh_async()
        finally:
            gate.set()
        future.result(timeout=5)
        assert seen == ["/api/experimental/engines"]
        catalog.close()

    def test_listeners_receive_new_list(self, mock_client, catalog_handler, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(catalog_handler))
        received = []
        catalog.connect(received.append)
        catalog.refresh()
        assert received == [["gh", "wiki", "google", "github", "wikipedia"]]

    def test_close_closes_client(self, mock_client, catalog_handler, endpoint):
        client = mock_client(catalog_handler)
        catalog = EngineCatalogService(endpoint, client=client)
        catalog.close()
        assert client.is_closed

class TestDescribe:

    def test_describe_engine(self, mock_client, catalog_handler, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(catalog_handler))
        assert catalog.describe("wiki") == EngineDescription(id="wiki", description="Search Wikipedia")
        assert catalog_handler.seen == ["/api/experimental/description/wiki"]

    def test_missing_description_is_none(self, mock_client, catalog_handler, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(catalog_handler))
        assert catalog.describe("google") == EngineDescription(id="google", description=None)

    def test_describe_failure_returns_none(self, mock_client, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(lambda r: httpx.Response(500)))
        assert catalog.describe("wiki") is None

    def test_cached_description_fetches_in_background(self, mock_client, catalog_handler, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(catalog_handler))
        assert catalog.cached_description("wiki") is None
        catalog.describe_async("wiki").result(timeout=5)
        assert catalog.cached_description("wiki") == EngineDescription(id="wiki", description="Search Wikipedia")
        assert catalog_handler.seen.count("/api/experimental/description/wiki") == 1
        catalog.close()

    def test_failed_description_is_retried(self, mock_client, endpoint):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(500)
            return httpx.Response(200, json={"id": "wiki", "description": "Search Wikipedia"})

        catalog = EngineCatalogService(endpoint, client=mock_client(handler))
        assert catalog.describe_async("wiki").result(timeout=5) is None
        assert catalog.describe_async("wiki").result(timeout=5).description == "Search Wikipedia"
        assert catalog.cached_description("wiki").description == "Search Wikipedia"
        catalog.close()


class TestCompleteMention:

    @pytest.fixture
    def catalog(self, mock_client, catalog_handler, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(catalog_handler))
        catalog.refresh()
        return catalog

    def test_prefix_matches_in_catalog_order(self, catalog):
        assert catalog.complete_mention("g")[:3] == ["gh", "google", "github"]

    def test_empty_partial_lists_catalog(self, catalog):
        assert catalog.complete_mention("", limit=2) == ["gh", "wiki"]

    def test_limit_applies_to_prefix_matches(self, catalog):
        assert catalog.complete_mention("g", limit=2) == ["gh", "google"]

    def test_fuzzy_match_for_typos(self, catalog):
        assert "wikipedia" in catalog.complete_mention("wikpedia")

    def test_unreachable_catalog_completes_nothing(self, mock_client, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(lambda r: httpx.Response(500)))
        catalog.refresh()
        assert catalog.complete_mention("wi") == []

    def test_completes_nothing_before_first_fetch(self, mock_client, catalog_handler, endpoint):
        catalog = EngineCatalogService(endpoint, client=mock_client(catalog_handler))
        assert catalog.complete_mention("g") == []
        catalog.close()

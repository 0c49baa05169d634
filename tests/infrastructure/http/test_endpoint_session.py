"""Unit tests for EndpointSession.

Tests cover:
- Ordered probing and exhaustion
- Single-flight resolution and stale probe results
- Offline reads served from sample data
- Create with re-probe, server validation and local-save confirmation
- Delete policies (never local-only while online)
- Lifecycle: close, listeners, offline toggle
"""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from src.core.entities.outcome import (
    DataSource,
    Exhausted,
    LocalOnlySuccess,
    OutcomeKind,
    RemoteFailure,
    RemoteSuccess,
    Resolved,
    ValidationFailure,
)
from src.core.entities.session import SessionState, SessionStatus
from src.core.exceptions import ConfigurationError, SessionClosedError
from src.core.services.sample_data import SAMPLE_PRODUCTS, SAMPLE_SALES, sample_records
from src.infrastructure.http.endpoint_session import EndpointSession

PRODUCTS_PAGE = [
    {"id": 1, "name": "Laptop", "price": 999.0, "description": "15in", "category": "tech", "stock": 4},
    {"id": 2, "name": "Mouse", "price": 19.5, "description": "usb", "category": "tech", "stock": 40},
]


class FakeApi:
    """
    In-memory stand-in for the inventory API, keyed by host.

    Hosts in `down` refuse connections, hosts in `slow` time out. Routes in
    `overrides` map (method, path) to a handler that may return a response
    or raise.
    """

    def __init__(self, collections: dict[str, list] | None = None):
        self.collections = collections if collections is not None else {
            "products": [dict(p) for p in PRODUCTS_PAGE],
            "sales": [],
        }
        self.down: set[str] = set()
        self.slow: set[str] = set()
        self.overrides: dict[tuple[str, str], object] = {}
        self.requests: list[httpx.Request] = []
        self._next_id = 100

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host in self.slow:
            raise httpx.ConnectTimeout("timed out", request=request)
        if host in self.down:
            raise httpx.ConnectError("connection refused", request=request)

        override = self.overrides.get((request.method, request.url.path))
        if override is not None:
            return override(request)

        parts = request.url.path.strip("/").split("/")
        resource = parts[0]
        if request.method == "GET":
            return httpx.Response(200, json=self.collections.get(resource, []))
        if request.method == "POST":
            body = json.loads(request.content)
            self._next_id += 1
            return httpx.Response(201, json={**body, "id": self._next_id})
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(405)

    def hosts(self, method: str | None = None) -> list[str]:
        return [r.url.host for r in self.requests if method is None or r.method == method]

    def count(self, method: str) -> int:
        return len(self.hosts(method))


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection reset", request=request)


@pytest.fixture
def api():
    return FakeApi()


class TestResolve:
    """Tests for candidate probing."""

    @pytest.mark.parametrize("position", [0, 1, 2])
    async def test_single_good_candidate_found_at_any_position(self, make_session, api, position):
        candidates = ["http://bad1", "http://bad2", "http://bad3"]
        candidates[position] = "http://good"
        api.down = {"bad1", "bad2", "bad3"}
        session = make_session(api, candidates)

        outcome = await session.resolve()

        assert outcome == Resolved("http://good")
        assert session.state == SessionState.online("http://good")

    async def test_timeouts_then_success(self, make_session, api):
        """Two candidates time out, the third answers 200."""
        api.slow = {"bad1", "bad2"}
        session = make_session(api, ["http://bad1", "http://bad2", "http://good"])

        outcome = await session.resolve()

        assert outcome == Resolved("http://good")
        assert session.state == SessionState.online("http://good")
        assert api.hosts() == ["bad1", "bad2", "good"]

    async def test_first_success_stops_probing(self, make_session, api):
        session = make_session(api, ["http://a", "http://b", "http://c"])

        await session.resolve()

        assert api.hosts() == ["a"]

    async def test_exhausted_after_each_candidate_once_in_order(self, make_session, api):
        api.down = {"a", "c"}
        api.slow = {"b"}
        session = make_session(api, ["http://a", "http://b", "http://c"])

        outcome = await session.resolve()

        assert isinstance(outcome, Exhausted)
        assert outcome.attempted == ("http://a", "http://b", "http://c")
        assert session.state == SessionState.offline()
        assert api.hosts() == ["a", "b", "c"]

    async def test_non_2xx_probe_is_a_failure(self, make_session, api):
        api.overrides[("GET", "/products")] = lambda r: (
            httpx.Response(503) if r.url.host == "a" else httpx.Response(200, json=[])
        )
        session = make_session(api, ["http://a", "http://b"])

        outcome = await session.resolve()

        assert outcome == Resolved("http://b")

    async def test_probe_uses_configured_resource(self, make_session, api):
        session = make_session(api, ["http://a/api"], probe_resource="health")

        await session.resolve()

        assert str(api.requests[0].url) == "http://a/api/health"

    async def test_resolve_twice_keeps_endpoint(self, make_session, api):
        session = make_session(api, ["http://a", "http://b"])

        first = await session.resolve()
        second = await session.resolve()

        assert first == second == Resolved("http://a")
        assert session.state.active_endpoint == "http://a"
        assert api.count("GET") == 1

    async def test_force_reprobes_from_the_top(self, make_session, api):
        session = make_session(api, ["http://a", "http://b"])
        await session.resolve()
        api.down = {"a"}

        outcome = await session.check_connection()

        assert outcome == Resolved("http://b")
        assert api.hosts() == ["a", "a", "b"]

    async def test_new_candidates_without_active_endpoint_reprobe(self, make_session, api):
        session = make_session(api, ["http://a"])
        await session.resolve()

        outcome = await session.resolve(["http://b", "http://c"])

        assert outcome == Resolved("http://b")
        assert session.candidates == ("http://b", "http://c")

    async def test_concurrent_callers_share_one_cycle(self, make_session):
        calls = []

        async def handler(request):
            calls.append(request.url.host)
            await asyncio.sleep(0.02)
            return httpx.Response(200, json=[])

        session = make_session(handler, ["http://a", "http://b"])

        outcomes = await asyncio.gather(session.resolve(), session.resolve(), session.resolve())

        assert set(outcomes) == {Resolved("http://a")}
        assert calls == ["a"]

    async def test_stale_probe_result_is_discarded_after_go_offline(self, make_session):
        release = asyncio.Event()

        async def handler(request):
            await release.wait()
            return httpx.Response(200, json=[])

        session = make_session(handler, ["http://a"])
        probe = asyncio.ensure_future(session.resolve())
        await asyncio.sleep(0.01)

        session.go_offline()
        release.set()
        await probe

        assert session.state == SessionState.offline()

    async def test_go_online_starts_fresh_cycle_while_old_one_is_pending(self, make_session):
        release = asyncio.Event()
        calls = []

        async def handler(request):
            calls.append(request.url.host)
            if len(calls) == 1:
                await release.wait()
            return httpx.Response(200, json=[])

        session = make_session(handler, ["http://good"])
        stale = asyncio.ensure_future(session.resolve())
        await asyncio.sleep(0.01)
        session.go_offline()

        outcome = await session.go_online()

        assert outcome == Resolved("http://good")
        assert session.state == SessionState.online("http://good")
        assert calls == ["good", "good"]

        release.set()
        await stale
        assert session.state == SessionState.online("http://good")

    async def test_candidates_must_not_be_empty(self, api):
        with pytest.raises(ConfigurationError):
            EndpointSession([], client=httpx.AsyncClient(transport=httpx.MockTransport(api)))

    async def test_single_string_rejected(self, api):
        with pytest.raises(ConfigurationError):
            EndpointSession("http://a", client=httpx.AsyncClient(transport=httpx.MockTransport(api)))

    async def test_trailing_slashes_stripped(self, make_session, api):
        session = make_session(api, ["http://a/api/", " http://b "])

        assert session.candidates == ("http://a/api", "http://b")

    async def test_candidates_default_to_settings(self, make_session, api, monkeypatch):
        monkeypatch.setenv("API_CANDIDATE_URLS", '["http://from-env/api/"]')

        session = make_session(api)

        assert session.candidates == ("http://from-env/api",)


class TestFetchCollection:
    """Tests for collection reads."""

    async def test_first_fetch_resolves_then_reads(self, make_session, api):
        session = make_session(api, ["http://a"])

        result = await session.fetch_collection("products")

        assert result.source == DataSource.REMOTE
        assert result.items == PRODUCTS_PAGE
        assert not result.degraded
        assert session.state.is_online
        assert session.local_view("products") == PRODUCTS_PAGE

    async def test_offline_serves_samples_without_network(self, make_session, api):
        session = make_session(api, ["http://a"])
        session.go_offline()

        result = await session.fetch_collection("products")

        assert result.items == sample_records(SAMPLE_PRODUCTS)
        assert result.source == DataSource.SAMPLE
        assert result.notice
        assert api.requests == []

    async def test_after_exhaustion_reads_make_no_calls(self, make_session, api):
        api.down = {"a", "b"}
        session = make_session(api, ["http://a", "http://b"])
        await session.resolve()
        api.requests.clear()

        result = await session.fetch_collection("sales")

        assert result.items == sample_records(SAMPLE_SALES)
        assert api.requests == []

    async def test_samples_are_fresh_copies(self, make_session, api):
        session = make_session(api, ["http://a"])
        session.go_offline()

        first = await session.fetch_collection("products")
        first.items[0]["name"] = "mutated"
        second = await session.fetch_collection("products")

        assert second.items[0]["name"] == SAMPLE_PRODUCTS[0]["name"]

    async def test_failed_read_reprobes_and_retries_on_next_endpoint(self, make_session, api):
        session = make_session(api, ["http://a", "http://b"])
        await session.resolve()
        api.down = {"a"}

        result = await session.fetch_collection("products")

        assert result.source == DataSource.REMOTE
        assert session.state == SessionState.online("http://b")
        assert api.hosts() == ["a", "a", "a", "b", "b"]

    async def test_failed_read_with_no_endpoint_left_goes_offline(self, make_session, api):
        session = make_session(api, ["http://a", "http://b"])
        await session.resolve()
        api.down = {"a", "b"}

        result = await session.fetch_collection("products")

        assert result.source == DataSource.SAMPLE
        assert result.items == sample_records(SAMPLE_PRODUCTS)
        assert session.state == SessionState.offline()

    async def test_retry_failure_after_reprobe_serves_samples_and_stays_online(
        self, make_session, api
    ):
        """Probe succeeds but the collection body is not JSON, twice."""
        api.overrides[("GET", "/products")] = lambda r: httpx.Response(200, text="<html>")
        session = make_session(api, ["http://a"])

        result = await session.fetch_collection("products")

        assert result.degraded
        assert "response is not JSON" in result.notice
        assert session.state == SessionState.online("http://a")

    async def test_data_envelope_unwrapped(self, make_session, api):
        api.overrides[("GET", "/sales")] = lambda r: httpx.Response(
            200, json={"data": [{"id": 9, "customer": "Ana"}, "junk"], "total": 1}
        )
        session = make_session(api, ["http://a"])

        result = await session.fetch_collection("sales")

        assert result.items == [{"id": 9, "customer": "Ana"}]

    async def test_unknown_resource_raises(self, make_session, api):
        session = make_session(api, ["http://a"])

        with pytest.raises(ConfigurationError):
            await session.fetch_collection("customers")

        assert api.requests == []

    async def test_local_view_is_a_copy(self, make_session, api):
        session = make_session(api, ["http://a"])
        await session.fetch_collection("products")

        session.local_view("products").clear()

        assert len(session.local_view("products")) == 2


class TestCreateEntity:
    """Tests for entity creation."""

    async def test_offline_create_is_local_only_without_http(self, make_session, api, product_form):
        session = make_session(api, ["http://a"])
        session.go_offline()

        outcome = await session.create_entity("products", product_form)

        assert isinstance(outcome, LocalOnlySuccess)
        assert outcome.reason == "offline"
        assert outcome.entity["price"] == 9.99
        assert outcome.entity["stock"] == 3
        assert outcome.entity["id"].startswith("local-")
        assert api.requests == []
        assert session.local_view("products")[-1] == outcome.entity

    async def test_invalid_payload_never_touches_state_or_network(self, make_session, api, product_form):
        session = make_session(api, ["http://a"])
        product_form["name"] = "   "

        outcome = await session.create_entity("products", product_form)

        assert isinstance(outcome, ValidationFailure)
        assert outcome.field_errors == {"name": ["This field is required"]}
        assert not outcome.from_server
        assert session.state == SessionState.unresolved()
        assert api.requests == []

    @pytest.mark.parametrize(
        "field,value",
        [
            ("price", "abc"),
            ("price", "-1"),
            ("price", "inf"),
            ("price", "nan"),
            ("stock", "2.5"),
            ("stock", "-3"),
        ],
    )
    async def test_invalid_numbers_rejected(self, make_session, api, product_form, field, value):
        session = make_session(api, ["http://a"])
        product_form[field] = value

        outcome = await session.create_entity("products", product_form)

        assert outcome.kind == OutcomeKind.VALIDATION_FAILURE
        assert field in outcome.field_errors

    async def test_non_finite_price_rejected_before_sending(self, make_session, api, product_form):
        session = make_session(api, ["http://a"])
        await session.resolve()
        product_form["price"] = "inf"

        outcome = await session.create_entity("products", product_form)

        assert isinstance(outcome, ValidationFailure)
        assert "price" in outcome.field_errors
        assert api.count("POST") == 0
        assert session.state == SessionState.online("http://a")

    async def test_online_create_posts_coerced_body(self, make_session, api, product_form):
        session = make_session(api, ["http://a"])
        await session.fetch_collection("products")

        outcome = await session.create_entity("products", product_form)

        assert isinstance(outcome, RemoteSuccess)
        assert outcome.entity["id"] == 101
        sent = json.loads(api.requests[-1].content)
        assert sent["price"] == 9.99
        assert sent["stock"] == 3
        assert len(session.local_view("products")) == 3

    async def test_server_validation_errors_returned_without_retry(self, make_session, api, product_form):
        api.overrides[("POST", "/products")] = lambda r: httpx.Response(
            422,
            json={"message": "The name has already been taken.", "errors": {"name": ["taken"]}},
        )
        session = make_session(api, ["http://a"])

        outcome = await session.create_entity("products", product_form)

        assert isinstance(outcome, ValidationFailure)
        assert outcome.from_server
        assert outcome.field_errors == {"name": ["taken"]}
        assert outcome.error.status_code == 422
        assert api.count("POST") == 1
        assert session.state.is_online

    async def test_failed_post_reprobes_and_retries(self, make_session, api, product_form):
        session = make_session(api, ["http://a", "http://b"])
        await session.resolve()
        api.down = {"a"}

        outcome = await session.create_entity("products", product_form)

        assert isinstance(outcome, RemoteSuccess)
        assert api.hosts("POST") == ["a", "b"]
        assert session.state == SessionState.online("http://b")

    async def test_unreachable_asks_before_saving_locally(self, make_session, api, product_form):
        session = make_session(api, ["http://a"])
        await session.resolve()
        api.down = {"a"}
        decider = AsyncMock(return_value=True)

        outcome = await session.create_entity("products", product_form, confirm_local_save=decider)

        assert isinstance(outcome, LocalOnlySuccess)
        decider.assert_awaited_once_with("no API endpoint is reachable")
        assert session.state == SessionState.offline()

    async def test_declined_local_save_is_remote_failure(self, make_session, api, product_form):
        session = make_session(api, ["http://a"])
        await session.fetch_collection("products")
        api.down = {"a"}

        outcome = await session.create_entity(
            "products", product_form, confirm_local_save=lambda reason: False
        )

        assert isinstance(outcome, RemoteFailure)
        assert len(session.local_view("products")) == 2
        # Exhausted re-probe already switched the session offline
        assert session.state == SessionState.offline()

    async def test_declined_local_save_after_failed_retry_stays_online(
        self, make_session, api, product_form
    ):
        api.overrides[("POST", "/products")] = _refuse
        session = make_session(api, ["http://a"])

        outcome = await session.create_entity(
            "products", product_form, confirm_local_save=lambda reason: False
        )

        assert isinstance(outcome, RemoteFailure)
        assert session.state == SessionState.online("http://a")

    async def test_no_decider_discards(self, make_session, api, product_form):
        session = make_session(api, ["http://a"])
        await session.resolve()
        api.down = {"a"}

        outcome = await session.create_entity("products", product_form)

        assert outcome.kind == OutcomeKind.REMOTE_FAILURE
        assert session.local_view("products") == []

    async def test_unresolved_create_with_nothing_reachable_is_local(
        self, make_session, api, product_form
    ):
        """Resolution on first use exhausts, so the session is already offline."""
        api.down = {"a"}
        session = make_session(api, ["http://a"])

        outcome = await session.create_entity("products", product_form)

        assert isinstance(outcome, LocalOnlySuccess)
        assert api.count("POST") == 0

    async def test_accepting_local_save_after_failed_retry_goes_offline(
        self, make_session, api, product_form
    ):
        """Endpoint answers probes but refuses the POST twice."""
        api.overrides[("POST", "/products")] = _refuse
        session = make_session(api, ["http://a"])
        reasons = []

        def decider(reason):
            reasons.append(reason)
            return True

        outcome = await session.create_entity("products", product_form, confirm_local_save=decider)

        assert isinstance(outcome, LocalOnlySuccess)
        assert "connection reset" in reasons[0]
        assert api.count("POST") == 2
        assert session.state == SessionState.offline()

    async def test_http_error_without_field_errors_is_remote_failure(self, make_session, api, product_form):
        api.overrides[("POST", "/products")] = lambda r: httpx.Response(500, json={"message": "boom"})
        session = make_session(api, ["http://a"])

        outcome = await session.create_entity("products", product_form)

        assert outcome == RemoteFailure("HTTP 500")
        assert session.state.is_online

    async def test_sale_payload_validated(self, make_session, api):
        session = make_session(api, ["http://a"])
        session.go_offline()

        outcome = await session.create_entity(
            "sales", {"customer": "Ana", "total": 10, "product_id": 1, "quantity": 0, "price": 10}
        )

        assert outcome.kind == OutcomeKind.VALIDATION_FAILURE
        assert "quantity" in outcome.field_errors


class TestDeleteEntity:
    """Tests for entity deletion."""

    async def test_online_delete_removes_after_confirmation(self, make_session, api):
        session = make_session(api, ["http://a"])
        await session.fetch_collection("products")

        outcome = await session.delete_entity("products", 2)

        assert isinstance(outcome, RemoteSuccess)
        assert outcome.entity["name"] == "Mouse"
        assert api.requests[-1].url.path == "/products/2"
        assert [p["id"] for p in session.local_view("products")] == [1]

    async def test_http_failure_keeps_entity_and_does_not_reprobe(self, make_session, api):
        api.overrides[("DELETE", "/products/1")] = lambda r: httpx.Response(500)
        session = make_session(api, ["http://a", "http://b"])
        await session.fetch_collection("products")
        before = len(api.requests)

        outcome = await session.delete_entity("products", 1)

        assert outcome == RemoteFailure("HTTP 500")
        assert len(session.local_view("products")) == 2
        assert len(api.requests) == before + 1

    async def test_transport_failure_reprobes_and_retries_once(self, make_session, api):
        session = make_session(api, ["http://a", "http://b"])
        await session.fetch_collection("products")
        api.down = {"a"}

        outcome = await session.delete_entity("products", "1")

        assert isinstance(outcome, RemoteSuccess)
        assert api.hosts("DELETE") == ["a", "b"]
        assert len(session.local_view("products")) == 1

    async def test_unreachable_delete_never_removes_locally(self, make_session, api):
        session = make_session(api, ["http://a"])
        await session.fetch_collection("products")
        api.down = {"a"}

        outcome = await session.delete_entity("products", 1)

        assert isinstance(outcome, RemoteFailure)
        assert len(session.local_view("products")) == 2

    async def test_offline_delete_is_local_only(self, make_session, api):
        session = make_session(api, ["http://a"])
        session.go_offline()
        await session.fetch_collection("products")

        outcome = await session.delete_entity("products", 3)

        assert isinstance(outcome, LocalOnlySuccess)
        assert [p["id"] for p in session.local_view("products")] == [1, 2]
        assert api.requests == []

    async def test_offline_delete_of_unknown_id_fails(self, make_session, api):
        session = make_session(api, ["http://a"])
        session.go_offline()

        outcome = await session.delete_entity("products", 42)

        assert outcome == RemoteFailure("products 42 is not in the local view")
        assert len(session.local_view("products")) == 3
        assert api.requests == []


class TestLifecycle:
    """Tests for state listeners, the offline toggle and close."""

    async def test_listeners_notified_on_change(self, make_session, api):
        session = make_session(api, ["http://a"])
        seen = []
        session.subscribe(seen.append)

        await session.resolve()
        await session.resolve()
        session.go_offline()

        assert [s.status for s in seen] == [SessionStatus.ONLINE, SessionStatus.OFFLINE]

    async def test_unsubscribe_and_failing_listener(self, make_session, api):
        session = make_session(api, ["http://a"])
        seen = []

        def broken(state):
            raise RuntimeError("listener bug")

        session.subscribe(broken)
        unsubscribe = session.subscribe(seen.append)
        unsubscribe()

        outcome = await session.resolve()

        assert outcome == Resolved("http://a")
        assert seen == []

    async def test_go_offline_shows_samples(self, make_session, api):
        session = make_session(api, ["http://a"])
        await session.fetch_collection("products")

        session.go_offline()

        assert session.local_view("products") == sample_records(SAMPLE_PRODUCTS)
        assert session.local_view("sales") == sample_records(SAMPLE_SALES)

    async def test_go_online_probes_again(self, make_session, api):
        session = make_session(api, ["http://a"])
        session.go_offline()

        outcome = await session.go_online()

        assert outcome == Resolved("http://a")
        assert session.state.is_online

    async def test_close_cancels_in_flight_probe(self, make_session):
        async def handler(request):
            await asyncio.Event().wait()

        session = make_session(handler, ["http://a"])
        probe = asyncio.ensure_future(session.resolve())
        await asyncio.sleep(0.01)

        await session.close()

        with pytest.raises(SessionClosedError):
            await probe
        assert session.state == SessionState.unresolved()

    async def test_operations_after_close_raise(self, make_session, api, product_form):
        session = make_session(api, ["http://a"])
        await session.close()
        await session.close()

        assert session.closed
        with pytest.raises(SessionClosedError):
            await session.resolve()
        with pytest.raises(SessionClosedError):
            await session.fetch_collection("products")
        with pytest.raises(SessionClosedError):
            await session.create_entity("products", product_form)
        with pytest.raises(SessionClosedError):
            session.go_offline()

    async def test_owned_client_closed(self):
        client = AsyncMock()
        with patch(
            "src.infrastructure.http.endpoint_session.build_async_client", return_value=client
        ):
            async with EndpointSession(["http://a"]):
                pass

        client.aclose.assert_awaited_once()

    async def test_injected_client_left_open(self, api):
        client = httpx.AsyncClient(transport=httpx.MockTransport(api))
        async with EndpointSession(["http://a"], client=client):
            pass

        assert not client.is_closed
        await client.aclose()

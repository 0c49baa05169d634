"""
Endpoint session.

Resolves a working API base URL from an ordered candidate list, tracks
ONLINE/OFFLINE state, and routes every resource read and write through
that state:

- Candidates are probed one at a time, in order; the first 2xx wins.
- Only one probe cycle runs at a time; concurrent callers share it.
- A failed call re-probes the whole list before giving up on the network.
- While OFFLINE, reads serve built-in sample data and writes are applied
  to the local view only.
- Deletes are never downgraded to local-only while online.
"""

import asyncio
import copy
import inspect
import uuid
from collections.abc import Callable, Sequence
from typing import Any
from urllib.parse import quote

import httpx

from src.config import get_logger, get_settings
from src.core.entities.outcome import (
    CollectionResult,
    DataSource,
    Exhausted,
    LocalOnlySuccess,
    RemoteFailure,
    RemoteSuccess,
    Resolved,
    ResolveOutcome,
    ValidationFailure,
    WriteOutcome,
)
from src.core.entities.session import SessionState
from src.core.exceptions import (
    ConfigurationError,
    ServerValidationError,
    SessionClosedError,
    TransportError,
    ValidationError,
)
from src.core.interfaces.resource_gateway import IResourceGateway, LocalSaveDecider
from src.core.services.resources import (
    DEFAULT_RESOURCES,
    ResourceSpec,
    get_resource,
    validate_create_payload,
)
from src.infrastructure.http.client import build_async_client

logger = get_logger(__name__)

StateListener = Callable[[SessionState], None]

_OFFLINE_NOTICE = "Offline mode: showing sample data"
_EXHAUSTED_NOTICE = "No API endpoint is reachable: showing sample data"


class EndpointSession(IResourceGateway):
    """
    Connectivity-aware gateway to the inventory/sales API.

    One instance is shared by every screen of the app. The state is owned
    here; observers read it through `state` or `subscribe`.
    """

    def __init__(
        self,
        candidates: Sequence[str] | None = None,
        *,
        probe_resource: str | None = None,
        probe_timeout: float | None = None,
        request_timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
        resources: dict[str, ResourceSpec] | None = None,
    ):
        api = get_settings().api
        self._candidates = _check_candidates(
            api.candidate_urls if candidates is None else candidates
        )
        self._probe_resource = probe_resource or api.probe_resource
        self._probe_timeout = probe_timeout if probe_timeout is not None else api.probe_timeout
        self._request_timeout = (
            request_timeout if request_timeout is not None else api.request_timeout
        )
        self._resources = resources if resources is not None else DEFAULT_RESOURCES

        self._owns_client = client is None
        self._client = client or build_async_client(api)

        self._state = SessionState.unresolved()
        self._views: dict[str, list[dict[str, Any]]] = {}
        self._listeners: list[StateListener] = []
        self._resolving: asyncio.Task[ResolveOutcome] | None = None
        self._resolving_generation = 0
        # Bumped whenever in-flight probe results must no longer be applied
        self._generation = 0
        self._closed = False

    async def __aenter__(self) -> "EndpointSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def candidates(self) -> tuple[str, ...]:
        return tuple(self._candidates)

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a state-change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, new_state: SessionState) -> None:
        old_state = self._state
        if new_state == old_state:
            return
        self._state = new_state
        logger.info(
            "session_state_changed",
            old=old_state.status.value,
            new=new_state.status.value,
            endpoint=new_state.active_endpoint,
        )
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:
                logger.error("state_listener_error", error=str(e), error_type=type(e).__name__)

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise SessionClosedError(operation)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def resolve(
        self,
        candidates: Sequence[str] | None = None,
        timeout: float | None = None,
        *,
        force: bool = False,
    ) -> ResolveOutcome:
        """
        Probe candidates in order and settle on the first that answers 2xx.

        Args:
            candidates: Replacement candidate list, kept for later re-probes
            timeout: Per-probe timeout in seconds
            force: Probe even if the session is already ONLINE

        Returns:
            Resolved(url), or Exhausted once every candidate has failed
        """
        self._ensure_open("resolve")
        if candidates is not None:
            self._candidates = _check_candidates(candidates)

        if (
            self._resolving is None
            or self._resolving.done()
            or self._resolving_generation != self._generation
        ):
            active = self._state.active_endpoint
            if active is not None and not force and active in self._candidates:
                return Resolved(active)
            self._resolving = asyncio.ensure_future(
                self._probe_cycle(
                    tuple(self._candidates),
                    timeout if timeout is not None else self._probe_timeout,
                    self._generation,
                )
            )
            self._resolving_generation = self._generation
        else:
            logger.debug("probe_cycle_joined")

        task = self._resolving
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if self._closed and task.cancelled():
                raise SessionClosedError("resolve") from None
            raise

    async def check_connection(self) -> ResolveOutcome:
        """Re-probe from the top of the list, as the "test connection" action does."""
        return await self.resolve(force=True)

    async def _probe_cycle(
        self, candidates: tuple[str, ...], timeout: float, generation: int
    ) -> ResolveOutcome:
        attempted: list[str] = []
        for position, base in enumerate(candidates, start=1):
            url = _join(base, self._probe_resource)
            attempted.append(base)
            logger.info("probe_attempt", url=url, position=position, total=len(candidates))
            try:
                await self._get(url, timeout)
            except TransportError as e:
                logger.warning("probe_failed", url=url, reason=e.reason)
                continue

            logger.info("probe_success", endpoint=base)
            self._apply_probe_result(generation, SessionState.online(base))
            return Resolved(base)

        logger.warning("probe_exhausted", attempted=len(attempted))
        self._apply_probe_result(generation, SessionState.offline())
        return Exhausted(tuple(attempted))

    def _apply_probe_result(self, generation: int, new_state: SessionState) -> None:
        if generation != self._generation or self._closed:
            logger.info("probe_result_discarded", status=new_state.status.value)
            return
        self._set_state(new_state)

    def go_offline(self) -> None:
        """Switch to offline mode at the user's request."""
        self._ensure_open("go offline")
        self._generation += 1
        self._views = {name: spec.sample_set() for name, spec in self._resources.items()}
        logger.info("session_offline", reason="user")
        self._set_state(SessionState.offline())

    async def go_online(self) -> ResolveOutcome:
        """Leave offline mode; the session becomes UNRESOLVED and probes again."""
        self._ensure_open("go online")
        if self._state.is_offline:
            self._set_state(SessionState.unresolved())
        return await self.resolve()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_collection(self, resource: str) -> CollectionResult:
        """
        List a resource in server order.

        Served from sample data while OFFLINE. A failed read re-probes every
        candidate and retries once before falling back to samples.
        """
        self._ensure_open("fetch")
        spec = get_resource(resource, self._resources)
        if self._state.is_unresolved:
            await self.resolve()

        endpoint = self._state.active_endpoint
        if endpoint is None:
            return self._serve_samples(spec, _OFFLINE_NOTICE)

        try:
            items = await self._get_collection(endpoint, spec.name)
        except TransportError as e:
            logger.warning("fetch_failed", resource=spec.name, endpoint=endpoint, reason=e.reason)
            outcome = await self.resolve(force=True)
            if isinstance(outcome, Exhausted):
                return self._serve_samples(spec, _EXHAUSTED_NOTICE)
            try:
                items = await self._get_collection(outcome.url, spec.name)
            except TransportError as retry_error:
                logger.warning(
                    "fetch_retry_failed",
                    resource=spec.name,
                    endpoint=outcome.url,
                    reason=retry_error.reason,
                )
                return self._serve_samples(
                    spec, f"Could not load {spec.name} ({retry_error.reason}): showing sample data"
                )

        self._views[spec.name] = copy.deepcopy(items)
        logger.info("fetch_success", resource=spec.name, count=len(items))
        return CollectionResult(resource=spec.name, items=items, source=DataSource.REMOTE)

    async def _get_collection(self, endpoint: str, resource: str) -> list[dict[str, Any]]:
        url = _join(endpoint, resource)
        response = await self._get(url, self._request_timeout)
        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(url, "response is not JSON", response.status_code) from e

        # Paginated APIs wrap the list in a "data" envelope
        if isinstance(body, dict) and isinstance(body.get("data"), list):
            body = body["data"]
        if not isinstance(body, list):
            raise TransportError(url, "expected a JSON array", response.status_code)
        return [item for item in body if isinstance(item, dict)]

    def _serve_samples(self, spec: ResourceSpec, notice: str) -> CollectionResult:
        items = spec.sample_set()
        self._views[spec.name] = copy.deepcopy(items)
        logger.info("fetch_served_samples", resource=spec.name, count=len(items))
        return CollectionResult(
            resource=spec.name,
            items=items,
            source=DataSource.SAMPLE,
            notice=notice,
        )

    def local_view(self, resource: str) -> list[dict[str, Any]]:
        """Copy of the entities currently shown for a resource."""
        spec = get_resource(resource, self._resources)
        return copy.deepcopy(self._views.get(spec.name, []))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_entity(
        self,
        resource: str,
        payload: dict[str, Any],
        *,
        confirm_local_save: LocalSaveDecider | None = None,
    ) -> WriteOutcome:
        """
        Create an entity.

        Args:
            resource: Resource name ("products", "sales")
            payload: Create payload; numeric fields may be raw strings
            confirm_local_save: Asked, with the failure reason, whether to keep
                the entity locally when the server cannot be reached. Sync or
                async; declining (or passing None) discards the attempt.

        Returns:
            RemoteSuccess, LocalOnlySuccess, RemoteFailure or ValidationFailure
        """
        self._ensure_open("create")
        spec = get_resource(resource, self._resources)
        try:
            body = validate_create_payload(spec, payload)
        except ValidationError as e:
            logger.info("create_rejected", resource=spec.name, fields=sorted(e.field_errors))
            return ValidationFailure(e)

        if self._state.is_unresolved:
            await self.resolve()

        endpoint = self._state.active_endpoint
        if endpoint is None:
            return self._create_locally(spec, body, "offline")

        try:
            return await self._post(endpoint, spec, body)
        except ServerValidationError as e:
            return ValidationFailure(e)
        except TransportError as e:
            logger.warning("create_failed", resource=spec.name, endpoint=endpoint, reason=e.reason)
            reason = e.reason

        outcome = await self.resolve(force=True)
        if isinstance(outcome, Resolved):
            try:
                return await self._post(outcome.url, spec, body)
            except ServerValidationError as e:
                return ValidationFailure(e)
            except TransportError as e:
                logger.warning(
                    "create_retry_failed", resource=spec.name, endpoint=outcome.url, reason=e.reason
                )
                reason = e.reason
        else:
            reason = "no API endpoint is reachable"

        if await _ask(confirm_local_save, reason):
            self._generation += 1
            self._set_state(SessionState.offline())
            return self._create_locally(spec, body, reason)

        logger.info("create_discarded", resource=spec.name, reason=reason)
        return RemoteFailure(reason)

    async def _post(
        self, endpoint: str, spec: ResourceSpec, body: dict[str, Any]
    ) -> RemoteSuccess:
        url = _join(endpoint, spec.name)
        response = await self._send("POST", url, self._request_timeout, json=body)
        if not response.is_success:
            server_error = _server_validation_error(response)
            if server_error is not None:
                logger.info(
                    "create_rejected_by_server",
                    resource=spec.name,
                    status_code=response.status_code,
                    fields=sorted(server_error.field_errors),
                )
                raise server_error
            raise TransportError(url, f"HTTP {response.status_code}", response.status_code)

        entity = _json_object(response) or dict(body)
        self._views.setdefault(spec.name, []).append(copy.deepcopy(entity))
        logger.info("create_success", resource=spec.name, entity_id=entity.get("id"))
        return RemoteSuccess(entity)

    def _create_locally(
        self, spec: ResourceSpec, body: dict[str, Any], reason: str
    ) -> LocalOnlySuccess:
        entity = {**body, "id": f"local-{uuid.uuid4().hex[:12]}"}
        self._views.setdefault(spec.name, []).append(copy.deepcopy(entity))
        logger.info("create_local_only", resource=spec.name, entity_id=entity["id"], reason=reason)
        return LocalOnlySuccess(entity, reason)

    async def delete_entity(self, resource: str, entity_id: int | str) -> WriteOutcome:
        """
        Delete an entity by id.

        OFFLINE removes it from the local view only; an id that is not in the
        view is reported as RemoteFailure. ONLINE removes it from the local
        view only after the server confirmed; any failure leaves the view
        untouched and is reported as RemoteFailure.
        """
        self._ensure_open("delete")
        spec = get_resource(resource, self._resources)
        if self._state.is_unresolved:
            await self.resolve()

        endpoint = self._state.active_endpoint
        if endpoint is None:
            removed = self._remove_from_view(spec.name, entity_id)
            if removed is None:
                logger.info("delete_not_found_locally", resource=spec.name, entity_id=entity_id)
                return RemoteFailure(f"{spec.name} {entity_id} is not in the local view")
            logger.info("delete_local_only", resource=spec.name, entity_id=entity_id)
            return LocalOnlySuccess(removed, "offline")

        try:
            return await self._delete(endpoint, spec, entity_id)
        except TransportError as e:
            logger.warning(
                "delete_failed", resource=spec.name, entity_id=entity_id, reason=e.reason
            )
            if e.reached_server:
                return RemoteFailure(e.reason)
            reason = e.reason

        # Transport failure: the endpoint may be gone, look for another one
        outcome = await self.resolve(force=True)
        if isinstance(outcome, Resolved):
            try:
                return await self._delete(outcome.url, spec, entity_id)
            except TransportError as e:
                reason = e.reason
        return RemoteFailure(reason)

    async def _delete(
        self, endpoint: str, spec: ResourceSpec, entity_id: int | str
    ) -> RemoteSuccess:
        url = _join(endpoint, spec.name, quote(str(entity_id), safe=""))
        response = await self._send("DELETE", url, self._request_timeout)
        if not response.is_success:
            raise TransportError(url, f"HTTP {response.status_code}", response.status_code)
        removed = self._remove_from_view(spec.name, entity_id)
        logger.info("delete_success", resource=spec.name, entity_id=entity_id)
        return RemoteSuccess(removed or {"id": entity_id})

    def _remove_from_view(self, resource: str, entity_id: int | str) -> dict[str, Any] | None:
        view = self._views.get(resource, [])
        for index, item in enumerate(view):
            if str(item.get("id")) == str(entity_id):
                return view.pop(index)
        return None

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def _get(self, url: str, timeout: float) -> httpx.Response:
        response = await self._send("GET", url, timeout)
        if not response.is_success:
            raise TransportError(url, f"HTTP {response.status_code}", response.status_code)
        return response

    async def _send(
        self,
        method: str,
        url: str,
        timeout: float,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Issue one request; anything short of a response becomes TransportError."""
        try:
            return await self._client.request(method, url, json=json, timeout=timeout)
        except httpx.TimeoutException as e:
            raise TransportError(url, f"timed out after {timeout}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(url, str(e) or type(e).__name__) from e

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Tear the session down; an in-flight probe cycle is cancelled and ignored."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        if self._resolving is not None and not self._resolving.done():
            self._resolving.cancel()
        self._listeners.clear()
        self._views.clear()
        if self._owns_client:
            await self._client.aclose()
        logger.info("session_closed")


def _check_candidates(candidates: Sequence[str]) -> list[str]:
    if isinstance(candidates, str):
        raise ConfigurationError(
            "Candidates must be a sequence of URLs, not a single string",
            details={"candidates": candidates},
        )
    cleaned = [url.strip().rstrip("/") for url in candidates if url and url.strip()]
    if not cleaned:
        raise ConfigurationError("At least one candidate endpoint is required")
    return cleaned


def _join(base: str, *parts: str) -> str:
    return "/".join([base.rstrip("/"), *parts])


def _json_object(response: httpx.Response) -> dict[str, Any] | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        body = body["data"]
    return body if isinstance(body, dict) else None


def _server_validation_error(response: httpx.Response) -> ServerValidationError | None:
    """Structured `{"errors": {field: [messages]}}` body, if the server sent one."""
    body = _json_object(response)
    if not body or not isinstance(body.get("errors"), dict):
        return None
    field_errors: dict[str, list[str]] = {}
    for field, messages in body["errors"].items():
        if isinstance(messages, list):
            field_errors[str(field)] = [str(m) for m in messages]
        else:
            field_errors[str(field)] = [str(messages)]
    message = body.get("message") if isinstance(body.get("message"), str) else None
    return ServerValidationError(field_errors, response.status_code, message)


async def _ask(decider: LocalSaveDecider | None, reason: str) -> bool:
    if decider is None:
        return False
    decision = decider(reason)
    if inspect.isawaitable(decision):
        decision = await decision
    return bool(decision)

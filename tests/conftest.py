"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable, Generator

import httpx
import pytest
import pytest_asyncio

from src.application import services
from src.config import reset_settings
from src.infrastructure.http.endpoint_session import EndpointSession


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch) -> Generator[None, None, None]:
    """Fresh settings and no shared session for every test."""
    for name in ("API_CANDIDATE_URLS", "API_PROBE_RESOURCE", "API_PROBE_TIMEOUT", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    monkeypatch.setattr(services, "_endpoint_session", None)
    yield
    reset_settings()


@pytest_asyncio.fixture
async def make_session() -> AsyncGenerator[Callable[..., EndpointSession], None]:
    """
    Build EndpointSessions whose HTTP traffic goes to a MockTransport handler.

    Usage: make_session(handler, ["http://a", "http://b"], probe_timeout=1.0)
    """
    clients: list[httpx.AsyncClient] = []
    sessions: list[EndpointSession] = []

    def _make(handler, candidates=None, **kwargs) -> EndpointSession:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        session = EndpointSession(candidates, client=client, **kwargs)
        sessions.append(session)
        return session

    yield _make

    for session in sessions:
        await session.close()
    for client in clients:
        await client.aclose()


@pytest.fixture
def product_form() -> dict:
    """Product form exactly as typed by a user."""
    return {
        "name": "Widget",
        "price": "9.99",
        "stock": "3",
        "description": "d",
        "category": "c",
    }

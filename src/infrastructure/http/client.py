"""httpx client factory for the storefront API."""

import httpx

from src.config import get_settings
from src.config.settings import ApiSettings


def build_async_client(
    settings: ApiSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create the `httpx.AsyncClient` shared by one endpoint session.

    Every request made through it passes its own timeout; the client-level
    timeout only bounds calls that forget to.
    """
    settings = settings or get_settings().api
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout),
        follow_redirects=True,
        headers={
            "User-Agent": settings.user_agent,
            "Accept": "application/json",
        },
        transport=transport,
    )

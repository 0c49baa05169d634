"""HTTP access to the storefront API."""

from src.infrastructure.http.client import build_async_client
from src.infrastructure.http.endpoint_session import EndpointSession

__all__ = ["EndpointSession", "build_async_client"]

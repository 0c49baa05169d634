"""Abstract interface for reading and writing API resources."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from src.core.entities.outcome import CollectionResult, ResolveOutcome, WriteOutcome
from src.core.entities.session import SessionState

# Asked whether a failed create should be kept locally; may be async.
LocalSaveDecider = Callable[[str], bool | Awaitable[bool]]


class IResourceGateway(ABC):
    """
    Interface for resource access that degrades to offline data.

    Implementations never raise on network failure; they report it
    through the returned outcome.
    """

    @property
    @abstractmethod
    def state(self) -> SessionState:
        """Current connectivity snapshot."""

    @abstractmethod
    async def resolve(
        self,
        candidates: Sequence[str] | None = None,
        timeout: float | None = None,
        *,
        force: bool = False,
    ) -> ResolveOutcome:
        """Find a working base URL among the candidates."""

    @abstractmethod
    async def fetch_collection(self, resource: str) -> CollectionResult:
        """List a resource, falling back to sample data."""

    @abstractmethod
    async def create_entity(
        self,
        resource: str,
        payload: dict[str, Any],
        *,
        confirm_local_save: LocalSaveDecider | None = None,
    ) -> WriteOutcome:
        """Create an entity remotely, or locally when offline."""

    @abstractmethod
    async def delete_entity(self, resource: str, entity_id: int | str) -> WriteOutcome:
        """Delete an entity; never silently degraded to a local delete when online."""

    @abstractmethod
    def go_offline(self) -> None:
        """Switch to offline mode at the user's request."""

    @abstractmethod
    async def go_online(self) -> ResolveOutcome:
        """Leave offline mode and probe the candidates again."""

    @abstractmethod
    def local_view(self, resource: str) -> list[dict[str, Any]]:
        """Entities currently shown for a resource."""

    @abstractmethod
    async def close(self) -> None:
        """Release network resources; the gateway is unusable afterwards."""

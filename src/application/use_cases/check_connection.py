"""Check Connection Use Case — "test connection" and offline toggle buttons."""

from dataclasses import dataclass

from src.application.services import get_endpoint_session
from src.config import get_logger
from src.core.entities.outcome import Resolved, ResolveOutcome
from src.core.entities.session import SessionStatus
from src.core.interfaces.resource_gateway import IResourceGateway

logger = get_logger(__name__)


@dataclass
class ConnectionReport:
    """What the connection buttons tell the user."""

    status: SessionStatus
    endpoint: str | None
    message: str
    attempted: tuple[str, ...] = ()

    @property
    def online(self) -> bool:
        return self.status == SessionStatus.ONLINE


class CheckConnectionUseCase:
    """Probe the candidate endpoints or switch offline mode on and off."""

    def __init__(self, session: IResourceGateway | None = None):
        self._session = session

    def _get_session(self) -> IResourceGateway:
        if self._session is None:
            self._session = get_endpoint_session()
        return self._session

    async def execute(self) -> ConnectionReport:
        """Re-probe every candidate from the top of the list."""
        outcome = await self._get_session().resolve(force=True)
        return self._report(outcome)

    async def toggle_offline(self) -> ConnectionReport:
        """Flip between offline mode and a fresh probe."""
        session = self._get_session()
        if session.state.is_offline:
            outcome = await session.go_online()
            return self._report(outcome)

        session.go_offline()
        logger.info("offline_mode_enabled")
        return ConnectionReport(
            status=session.state.status,
            endpoint=None,
            message="Offline mode enabled: using sample data",
        )

    def _report(self, outcome: ResolveOutcome) -> ConnectionReport:
        state = self._get_session().state
        if isinstance(outcome, Resolved):
            message = f"Connected to {outcome.url}"
            attempted: tuple[str, ...] = ()
        else:
            message = "Could not reach any API endpoint: using offline data"
            attempted = outcome.attempted
        logger.info("connection_checked", status=state.status.value, endpoint=state.active_endpoint)
        return ConnectionReport(
            status=state.status,
            endpoint=state.active_endpoint,
            message=message,
            attempted=attempted,
        )

"""
Session factory for dependency injection.

Every use case shares one EndpointSession, so all screens agree on which
endpoint is active and whether the app is offline.
"""

from src.config import get_logger
from src.core.interfaces.resource_gateway import IResourceGateway

logger = get_logger(__name__)

# Singleton session instance
_endpoint_session: IResourceGateway | None = None


def get_endpoint_session(session: IResourceGateway | None = None) -> IResourceGateway:
    """
    Get or create the shared endpoint session.

    Args:
        session: Optional session to install as the shared instance

    Returns:
        The shared session
    """
    global _endpoint_session

    if session is not None:
        _endpoint_session = session
        return session

    if _endpoint_session is None:
        # Lazy import infrastructure to avoid circular imports
        from src.infrastructure.http.endpoint_session import EndpointSession

        _endpoint_session = EndpointSession()
        logger.info("endpoint_session_created")

    return _endpoint_session


async def reset_session() -> None:
    """Close and forget the shared session (for tests and shutdown)."""
    global _endpoint_session

    session, _endpoint_session = _endpoint_session, None
    if session is not None:
        await session.close()

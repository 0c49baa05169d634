"""Delete Record Use Case — delete button on the product and sales lists."""

from src.application.services import get_endpoint_session
from src.config import get_logger
from src.core.entities.outcome import WriteOutcome
from src.core.interfaces.resource_gateway import IResourceGateway

logger = get_logger(__name__)


class DeleteRecordUseCase:
    """Delete one product or sale by id."""

    def __init__(self, resource: str, session: IResourceGateway | None = None):
        self._resource = resource
        self._session = session

    def _get_session(self) -> IResourceGateway:
        if self._session is None:
            self._session = get_endpoint_session()
        return self._session

    async def execute(self, record_id: int | str) -> WriteOutcome:
        logger.info("delete_record_started", resource=self._resource, record_id=record_id)
        outcome = await self._get_session().delete_entity(self._resource, record_id)
        logger.info(
            "delete_record_complete",
            resource=self._resource,
            record_id=record_id,
            outcome=outcome.kind.value,
        )
        return outcome

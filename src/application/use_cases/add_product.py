"""Add Product Use Case — product form submit."""

from src.application.dto.requests import CreateProductRequest
from src.application.services import get_endpoint_session
from src.config import get_logger
from src.core.entities.outcome import WriteOutcome
from src.core.interfaces.resource_gateway import IResourceGateway, LocalSaveDecider
from src.core.services.resources import PRODUCTS

logger = get_logger(__name__)


class AddProductUseCase:
    """Create a product, remotely when possible and locally when offline."""

    def __init__(self, session: IResourceGateway | None = None):
        self._session = session

    def _get_session(self) -> IResourceGateway:
        if self._session is None:
            self._session = get_endpoint_session()
        return self._session

    async def execute(
        self,
        request: CreateProductRequest,
        confirm_local_save: LocalSaveDecider | None = None,
    ) -> WriteOutcome:
        """
        Submit the product form.

        Args:
            request: Raw form input
            confirm_local_save: Asked whether to keep the product locally if
                the server cannot be reached

        Returns:
            Outcome of the create; validation problems come back as
            ValidationFailure, never as exceptions
        """
        logger.info("add_product_started", name=request.name)
        outcome = await self._get_session().create_entity(
            PRODUCTS,
            request.to_payload(),
            confirm_local_save=confirm_local_save,
        )
        logger.info("add_product_complete", outcome=outcome.kind.value)
        return outcome

"""List Products Use Case — product list screen, with offline fallback."""

from dataclasses import dataclass, field

from pydantic import ValidationError as PydanticValidationError

from src.application.services import get_endpoint_session
from src.config import get_logger
from src.core.entities.outcome import DataSource
from src.core.entities.product import Product
from src.core.interfaces.resource_gateway import IResourceGateway
from src.core.services.resources import PRODUCTS

logger = get_logger(__name__)


@dataclass
class ProductListResult:
    """Products to display and whether they are real."""

    products: list[Product] = field(default_factory=list)
    source: DataSource = DataSource.REMOTE
    notice: str | None = None
    skipped: int = 0  # records that did not parse as products

    @property
    def degraded(self) -> bool:
        return self.source != DataSource.REMOTE


class ListProductsUseCase:
    """Fetch the product catalog through the shared session."""

    def __init__(self, session: IResourceGateway | None = None):
        self._session = session

    def _get_session(self) -> IResourceGateway:
        if self._session is None:
            self._session = get_endpoint_session()
        return self._session

    async def execute(self) -> ProductListResult:
        """Execute list products use case."""
        result = await self._get_session().fetch_collection(PRODUCTS)

        products: list[Product] = []
        skipped = 0
        for record in result.items:
            try:
                products.append(Product.model_validate(record))
            except PydanticValidationError as e:
                skipped += 1
                logger.warning("product_record_skipped", record_id=record.get("id"), error=str(e))

        logger.info(
            "products_listed",
            count=len(products),
            source=result.source.value,
            skipped=skipped,
        )
        return ProductListResult(
            products=products,
            source=result.source,
            notice=result.notice,
            skipped=skipped,
        )

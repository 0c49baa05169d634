"""Add Sale Use Case — sale form: product picker, cart and submit."""

from datetime import datetime

from src.application.dto.requests import CreateSaleRequest
from src.application.services import get_endpoint_session
from src.application.use_cases.list_products import ListProductsUseCase, ProductListResult
from src.config import get_logger
from src.core.entities.outcome import ValidationFailure, WriteOutcome
from src.core.entities.product import Product
from src.core.exceptions import CartError
from src.core.interfaces.resource_gateway import IResourceGateway, LocalSaveDecider
from src.core.services.resources import SALES
from src.core.services.sale_cart import SaleCart

logger = get_logger(__name__)


class AddSaleUseCase:
    """Assemble a sale from listed products and submit it."""

    def __init__(self, session: IResourceGateway | None = None):
        self._session = session

    def _get_session(self) -> IResourceGateway:
        if self._session is None:
            self._session = get_endpoint_session()
        return self._session

    async def available_products(self) -> ProductListResult:
        """Products the picker offers; sample products while offline."""
        return await ListProductsUseCase(self._get_session()).execute()

    @staticmethod
    def start_cart(product: Product | None = None) -> SaleCart:
        """New cart, pre-filled when the sale starts from a product detail."""
        cart = SaleCart()
        if product is not None:
            cart.add_product(product)
        return cart

    async def execute(
        self,
        request: CreateSaleRequest,
        cart: SaleCart,
        confirm_local_save: LocalSaveDecider | None = None,
        when: datetime | None = None,
    ) -> WriteOutcome:
        """Execute add sale use case."""
        try:
            payload = cart.to_payload(
                request.customer,
                status=request.status,
                payment_method=request.payment_method,
                when=when,
            )
        except CartError as e:
            logger.info("add_sale_rejected", fields=sorted(e.field_errors))
            return ValidationFailure(e)

        logger.info(
            "add_sale_started",
            customer=payload["customer"],
            lines=len(cart.lines),
            total=payload["total"],
        )
        outcome = await self._get_session().create_entity(
            SALES,
            payload,
            confirm_local_save=confirm_local_save,
        )
        logger.info("add_sale_complete", outcome=outcome.kind.value)
        return outcome

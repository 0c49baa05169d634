"""List Sales Use Case — sales list screen, with offline fallback."""

from dataclasses import dataclass, field

from pydantic import ValidationError as PydanticValidationError

from src.application.services import get_endpoint_session
from src.config import get_logger
from src.core.entities.outcome import DataSource
from src.core.entities.sale import Sale
from src.core.interfaces.resource_gateway import IResourceGateway
from src.core.services.resources import SALES

logger = get_logger(__name__)


@dataclass
class SaleListResult:
    """Sales to display and whether they are real."""

    sales: list[Sale] = field(default_factory=list)
    source: DataSource = DataSource.REMOTE
    notice: str | None = None
    skipped: int = 0

    @property
    def degraded(self) -> bool:
        return self.source != DataSource.REMOTE

    @property
    def revenue(self) -> float:
        return sum(sale.total for sale in self.sales)


class ListSalesUseCase:
    """Fetch recorded sales through the shared session."""

    def __init__(self, session: IResourceGateway | None = None):
        self._session = session

    def _get_session(self) -> IResourceGateway:
        if self._session is None:
            self._session = get_endpoint_session()
        return self._session

    async def execute(self) -> SaleListResult:
        result = await self._get_session().fetch_collection(SALES)

        sales: list[Sale] = []
        skipped = 0
        for record in result.items:
            try:
                sales.append(Sale.model_validate(record))
            except PydanticValidationError as e:
                skipped += 1
                logger.warning("sale_record_skipped", record_id=record.get("id"), error=str(e))

        logger.info("sales_listed", count=len(sales), source=result.source.value)
        return SaleListResult(
            sales=sales,
            source=result.source,
            notice=result.notice,
            skipped=skipped,
        )

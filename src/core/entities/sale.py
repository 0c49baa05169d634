"""
Sale domain entities.

The API stores a sale as one primary line (`product_id`, `quantity`,
`price`) plus `additional_products`; listings come back with a nested
`products` array instead.
"""

from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SaleStatus(str, Enum):
    """Lifecycle status of a sale."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: str | None) -> "SaleStatus | None":
        """Map API and legacy Spanish labels onto a status, None if unknown."""
        if not value:
            return None
        key = value.strip().lower()
        aliases = {
            "pendiente": cls.PENDING,
            "completada": cls.COMPLETED,
            "cancelada": cls.CANCELLED,
        }
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            return None


class PaymentMethod(str, Enum):
    """How the customer paid."""

    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class SaleLine(BaseModel):
    """A product line inside a listed sale."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    product_id: int | str | None = Field(
        default=None,
        validation_alias=AliasChoices("product_id", "productId"),
    )
    name: str | None = None
    price: float = 0.0
    quantity: int = 1

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class Sale(BaseModel):
    """A sale as listed by the sales API."""

    model_config = ConfigDict(extra="allow")

    id: int | str | None = None
    date: datetime | None = None
    customer: str = ""
    total: float = 0.0
    status: str = SaleStatus.PENDING.value
    payment_method: str | None = None
    products: list[SaleLine] = Field(default_factory=list)

    @property
    def normalized_status(self) -> SaleStatus | None:
        return SaleStatus.parse(self.status)


class SaleLinePayload(BaseModel):
    """One line of the create payload."""

    model_config = ConfigDict(allow_inf_nan=False)

    product_id: int | str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., gt=0)


class SaleCreate(BaseModel):
    """Create shape for a sale (flattened first line + additional lines)."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", allow_inf_nan=False)

    customer: str = Field(..., min_length=1)
    total: float = Field(..., ge=0)
    status: SaleStatus = SaleStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CASH
    date: datetime = Field(default_factory=datetime.now)
    product_id: int | str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., gt=0)
    additional_products: list[SaleLinePayload] = Field(default_factory=list)

"""Request DTOs for use cases.

Pydantic v2 models carrying raw form input. Field-level rules (required,
positive price, ...) are enforced by the resource create schemas, so these
models accept whatever the form holds.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.core.entities.sale import PaymentMethod, SaleStatus


class CreateProductRequest(BaseModel):
    """Product form input."""

    name: str = Field(default="", description="Product name")
    price: str | float = Field(default="", description="Price as typed, e.g. '299.99'")
    description: str = Field(default="", description="Product description")
    category: str = Field(default="", description="Category, e.g. 'Electrónica'")
    stock: str | int = Field(default="", description="Units in stock as typed")
    imageurl: str | None = Field(default=None, description="Optional image URL")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


class CreateSaleRequest(BaseModel):
    """Sale form input; the lines come from the cart."""

    customer: str = Field(default="", description="Customer name")
    status: SaleStatus = Field(default=SaleStatus.PENDING, description="Sale status")
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.CASH,
        description="How the customer pays",
    )

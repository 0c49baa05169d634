"""
Product domain entities.

`Product` is the typed view of a product record returned by the API;
`ProductCreate` is the create shape validated before any POST.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Product(BaseModel):
    """A product as listed by the inventory API."""

    model_config = ConfigDict(extra="allow")

    id: int | str | None = None
    name: str
    price: float = 0.0
    description: str = ""
    category: str = ""
    stock: int = 0
    imageurl: str | None = None

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


class ProductCreate(BaseModel):
    """
    Create shape for a product.

    Accepts raw form strings ("9.99", "3") and coerces them; price must be
    positive and stock a non-negative integer.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", allow_inf_nan=False)

    name: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    stock: int = Field(..., ge=0)
    imageurl: str | None = None

    @field_validator("imageurl", mode="before")
    @classmethod
    def blank_image_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

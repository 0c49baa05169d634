"""Core domain services."""

from src.core.services.resources import (
    DEFAULT_RESOURCES,
    PRODUCTS,
    SALES,
    ResourceSpec,
    get_resource,
    validate_create_payload,
)
from src.core.services.sale_cart import CartLine, SaleCart
from src.core.services.sample_data import SAMPLE_PRODUCTS, SAMPLE_SALES, sample_records

__all__ = [
    "DEFAULT_RESOURCES",
    "PRODUCTS",
    "SALES",
    "ResourceSpec",
    "get_resource",
    "validate_create_payload",
    "SaleCart",
    "CartLine",
    "SAMPLE_PRODUCTS",
    "SAMPLE_SALES",
    "sample_records",
]

"""
Application layer - use cases, DTOs, and the shared session factory.

Each use case stands in for one screen action of the storefront app and
talks to the API only through the shared endpoint session.
"""

from src.application.dto.requests import CreateProductRequest, CreateSaleRequest
from src.application.services import get_endpoint_session, reset_session
from src.application.use_cases import (
    AddProductUseCase,
    AddSaleUseCase,
    CheckConnectionUseCase,
    DeleteRecordUseCase,
    ListProductsUseCase,
    ListSalesUseCase,
)

__all__ = [
    # Request DTOs
    "CreateProductRequest",
    "CreateSaleRequest",
    # Use Cases
    "ListProductsUseCase",
    "AddProductUseCase",
    "ListSalesUseCase",
    "AddSaleUseCase",
    "DeleteRecordUseCase",
    "CheckConnectionUseCase",
    # Session factory
    "get_endpoint_session",
    "reset_session",
]

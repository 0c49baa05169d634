"""Application use cases."""

from src.application.use_cases.add_product import AddProductUseCase
from src.application.use_cases.add_sale import AddSaleUseCase
from src.application.use_cases.check_connection import (
    CheckConnectionUseCase,
    ConnectionReport,
)
from src.application.use_cases.delete_record import DeleteRecordUseCase
from src.application.use_cases.list_products import ListProductsUseCase, ProductListResult
from src.application.use_cases.list_sales import ListSalesUseCase, SaleListResult

__all__ = [
    "ListProductsUseCase",
    "ProductListResult",
    "AddProductUseCase",
    "ListSalesUseCase",
    "SaleListResult",
    "AddSaleUseCase",
    "DeleteRecordUseCase",
    "CheckConnectionUseCase",
    "ConnectionReport",
]

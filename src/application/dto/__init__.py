"""Data transfer objects for use case inputs."""

from src.application.dto.requests import CreateProductRequest, CreateSaleRequest

__all__ = [
    "CreateProductRequest",
    "CreateSaleRequest",
]

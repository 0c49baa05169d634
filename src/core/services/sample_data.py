"""Built-in sample records shown while a session is offline."""

import copy
from typing import Any

SAMPLE_PRODUCTS: tuple[dict[str, Any], ...] = (
    {
        "id": 1,
        "name": "Producto Offline 1",
        "price": 100,
        "description": "Descripción de producto offline 1",
        "category": "Electrónica",
        "stock": 10,
        "imageurl": None,
    },
    {
        "id": 2,
        "name": "Producto Offline 2",
        "price": 200,
        "description": "Descripción de producto offline 2",
        "category": "Ropa",
        "stock": 5,
        "imageurl": None,
    },
    {
        "id": 3,
        "name": "Producto Offline 3",
        "price": 300,
        "description": "Descripción de producto offline 3",
        "category": "Hogar",
        "stock": 15,
        "imageurl": None,
    },
)

SAMPLE_SALES: tuple[dict[str, Any], ...] = (
    {
        "id": 1,
        "date": "2025-03-08T14:30:00",
        "customer": "Cliente Offline 1",
        "total": 350,
        "products": [
            {"productId": 1, "name": "Producto Offline 1", "price": 100, "quantity": 2},
            {"productId": 2, "name": "Producto Offline 2", "price": 150, "quantity": 1},
        ],
        "status": "completada",
    },
    {
        "id": 2,
        "date": "2025-03-08T12:15:00",
        "customer": "Cliente Offline 2",
        "total": 600,
        "products": [
            {"productId": 3, "name": "Producto Offline 3", "price": 300, "quantity": 2},
        ],
        "status": "pendiente",
    },
    {
        "id": 3,
        "date": "2025-03-07T09:45:00",
        "customer": "Cliente Offline 3",
        "total": 450,
        "products": [
            {"productId": 1, "name": "Producto Offline 1", "price": 100, "quantity": 1},
            {"productId": 2, "name": "Producto Offline 2", "price": 150, "quantity": 1},
            {"productId": 3, "name": "Producto Offline 3", "price": 200, "quantity": 1},
        ],
        "status": "completada",
    },
)


def sample_records(records: tuple[dict[str, Any], ...]) -> list[dict[str, Any]]:
    """Fresh deep copies, so callers can never mutate the built-in set."""
    return [copy.deepcopy(r) for r in records]

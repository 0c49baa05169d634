"""Core domain entities."""

from src.core.entities.outcome import (
    CollectionResult,
    DataSource,
    Exhausted,
    LocalOnlySuccess,
    OutcomeKind,
    RemoteFailure,
    RemoteSuccess,
    Resolved,
    ResolveOutcome,
    ValidationFailure,
    WriteOutcome,
)
from src.core.entities.product import Product, ProductCreate
from src.core.entities.sale import (
    PaymentMethod,
    Sale,
    SaleCreate,
    SaleLine,
    SaleLinePayload,
    SaleStatus,
)
from src.core.entities.session import SessionState, SessionStatus

__all__ = [
    # Product entities
    "Product",
    "ProductCreate",
    # Sale entities
    "Sale",
    "SaleLine",
    "SaleCreate",
    "SaleLinePayload",
    "SaleStatus",
    "PaymentMethod",
    # Session entities
    "SessionState",
    "SessionStatus",
    # Outcomes
    "OutcomeKind",
    "DataSource",
    "Resolved",
    "Exhausted",
    "RemoteSuccess",
    "LocalOnlySuccess",
    "RemoteFailure",
    "ValidationFailure",
    "CollectionResult",
    "ResolveOutcome",
    "WriteOutcome",
]

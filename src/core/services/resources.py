"""
Resource registry.

Maps each logical API resource to its create schema and its offline
sample set, and validates create payloads against that schema.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.core.entities.product import ProductCreate
from src.core.entities.sale import SaleCreate
from src.core.exceptions import ConfigurationError, ValidationError
from src.core.services.sample_data import SAMPLE_PRODUCTS, SAMPLE_SALES, sample_records

PRODUCTS = "products"
SALES = "sales"

_REQUIRED_ERROR_TYPES = {"missing", "string_too_short"}


@dataclass(frozen=True)
class ResourceSpec:
    """How the session treats one resource."""

    name: str
    create_model: type[BaseModel]
    samples: tuple[dict[str, Any], ...]

    def sample_set(self) -> list[dict[str, Any]]:
        return sample_records(self.samples)


DEFAULT_RESOURCES: dict[str, ResourceSpec] = {
    PRODUCTS: ResourceSpec(PRODUCTS, ProductCreate, SAMPLE_PRODUCTS),
    SALES: ResourceSpec(SALES, SaleCreate, SAMPLE_SALES),
}


def get_resource(
    name: str, registry: dict[str, ResourceSpec] | None = None
) -> ResourceSpec:
    """Look up a resource, raising ConfigurationError for unknown names."""
    registry = DEFAULT_RESOURCES if registry is None else registry
    try:
        return registry[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown resource '{name}'",
            details={"resource": name, "known": sorted(registry)},
        ) from None


def validate_create_payload(spec: ResourceSpec, payload: dict[str, Any]) -> dict[str, Any]:
    """
    Validate and normalize a create payload.

    Args:
        spec: Resource the payload is meant for
        payload: Raw payload, numeric fields may still be strings

    Returns:
        JSON-ready payload with coerced field types

    Raises:
        ValidationError: With one message list per offending field
    """
    try:
        model = spec.create_model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(_field_errors(exc)) from exc
    return model.model_dump(mode="json")


def _field_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "__root__"
        if err["type"] in _REQUIRED_ERROR_TYPES:
            message = "This field is required"
        else:
            message = err["msg"]
        errors.setdefault(field, []).append(message)
    return errors

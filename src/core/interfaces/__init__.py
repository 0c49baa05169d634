"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.resource_gateway import IResourceGateway, LocalSaveDecider

__all__ = [
    "IResourceGateway",
    "LocalSaveDecider",
]

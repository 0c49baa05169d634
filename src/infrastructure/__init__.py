"""Infrastructure layer implementations."""

from src.infrastructure import http

__all__ = ["http"]

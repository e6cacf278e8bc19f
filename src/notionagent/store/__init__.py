"""Document store clients and their shared records and errors."""

from .errors import (
    NotFoundError,
    RateLimitedError,
    StoreError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from .memory import InMemoryStore
from .models import Document, page_title

__all__ = [
    "Document",
    "InMemoryStore",
    "NotFoundError",
    "RateLimitedError",
    "StoreError",
    "TransportError",
    "UnauthorizedError",
    "ValidationError",
    "page_title",
]

"""Typed failures raised by document store clients."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class StoreError(RuntimeError):
    """Domain error raised for failed document store requests."""

    operation: str
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        status = f", status={self.status_code}" if self.status_code is not None else ""
        return f"{self.message} (operation={self.operation}{status})"


class NotFoundError(StoreError):
    """The page, block or endpoint does not exist or is not shared with the integration."""


class UnauthorizedError(StoreError):
    """The integration token is missing, invalid or lacks access."""


class RateLimitedError(StoreError):
    """The store asked the client to slow down."""


class ValidationError(StoreError):
    """The store rejected the request body."""


class TransportError(StoreError):
    """Network failure, timeout or an unexpected server error."""


def error_for_status(status_code: int, *, operation: str, message: str) -> StoreError:
    if status_code in {401, 403}:
        return UnauthorizedError(operation=operation, message=message, status_code=status_code)
    if status_code == 404:
        return NotFoundError(operation=operation, message=message, status_code=status_code)
    if status_code == 429:
        return RateLimitedError(operation=operation, message=message, status_code=status_code)
    if status_code in {400, 409, 422}:
        return ValidationError(operation=operation, message=message, status_code=status_code)
    return TransportError(operation=operation, message=message, status_code=status_code)

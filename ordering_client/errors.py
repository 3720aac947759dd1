from __future__ import annotations

from typing import Optional


class OrderingClientError(Exception):
    """Base class for errors raised by ordering_client."""


class ValidationError(OrderingClientError):
    """Input rejected locally, before any remote collaborator is called."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class RequestError(OrderingClientError):
    """A remote collaborator failed or returned an unusable result."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

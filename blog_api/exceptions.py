"""
Exception hierarchy shared by the data-access and API layers.
"""

from __future__ import annotations

from typing import Any

RECORD_NOT_FOUND = "record not found"


class BlogError(Exception):
    """Base exception for all blog service errors."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}


class InvalidIdentifierError(BlogError):
    """Raised when a numeric path parameter cannot be parsed."""


class RepositoryError(BlogError):
    """Raised when the relational store fails to answer a query."""


class NotFoundError(RepositoryError):
    """Raised when a lookup matches no record."""

    def __init__(
        self, message: str = RECORD_NOT_FOUND, *, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, context=context)


__all__ = [
    "RECORD_NOT_FOUND",
    "BlogError",
    "InvalidIdentifierError",
    "NotFoundError",
    "RepositoryError",
]

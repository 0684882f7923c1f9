"""
Base repository class with shared utilities.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...exceptions import NotFoundError, RepositoryError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class BaseRepository:
    """
    Base class for all repositories.

    Lookups either return a fully loaded entity or raise a
    ``RepositoryError``; driver exceptions never leak past this layer.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        """Expose the underlying session for transaction management."""
        return self._session

    @contextmanager
    def _store_errors(self, operation: str) -> Iterator[None]:
        """Translate SQLAlchemy failures raised inside the block."""
        try:
            yield
        except SQLAlchemyError as exc:
            LOGGER.debug("Store query %s failed: %s", operation, exc)
            raise RepositoryError(str(exc), context={"operation": operation}) from exc

    @staticmethod
    def _require(entity: T | None, **criteria: object) -> T:
        if entity is None:
            raise NotFoundError(context=criteria)
        return entity


__all__ = ["BaseRepository"]

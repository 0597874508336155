"""Generic read repository interface (Dependency Inversion Principle).

Provides ``IReadRepository[T]``, the base abstract class that the
domain-specific repository interfaces extend.  Records are owned by
external APIs, so this layer only reads; mutations are named operations
declared on each domain interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class IReadRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the record type served by the
    repository (e.g. ``OrderDTO``).
    """

    @abstractmethod
    def get_by_id(self, id: int) -> Optional[T]:
        """Retrieve a record by its server-assigned id."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[T]:
        """List records with optional server-side filters."""

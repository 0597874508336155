"""Order repository interface.

Extends ``IReadRepository[OrderDTO]`` with the named transition calls of
the Order API.  One repository serves one order family (purchase or
service); the service layer depends exclusively on this contract (DIP).

Every method raises ``OrderApiError`` when the Order API rejects the call
or cannot be reached.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from modules.core.repositories.interfaces import IReadRepository

if TYPE_CHECKING:
    from modules.orders.constants import OrderType
    from modules.orders.dtos import OrderDTO, UploadFile


class IOrderRepository(IReadRepository["OrderDTO"]):
    """Repository contract for one order family."""

    tipo: OrderType
    # Rows of the last ``list`` call dropped as malformed.
    skipped: int = 0

    @abstractmethod
    def approve(self, id: int, action: str) -> Any:
        """Flip the approval flag owned by *action* (an approval ``OrderAction``)."""

    @abstractmethod
    def transfer(self, id: int) -> Any:
        """Run the final transfer of an order whose payment disposition is PAGAR."""

    @abstractmethod
    def upload_file(self, id: int, file: UploadFile) -> Optional[str]:
        """Upload the operation evidence; return its URL when the API reports it."""

    @abstractmethod
    def upload_retention_receipt(
        self, id: int, file: UploadFile, nro_serie: str
    ) -> Optional[str]:
        """Upload the retention receipt with its series number; return its URL."""

    @abstractmethod
    def delete(self, id: int) -> Any:
        """Soft-delete an order."""

    @abstractmethod
    def restore(self, id: int) -> Any:
        """Clear the soft-delete marker of an order."""

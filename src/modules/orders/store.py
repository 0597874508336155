"""Shared order list store.

Holds the last fetched list of each order family in the Django cache
(Redis in deployments, local memory otherwise) so every worker and request
sees the same lists.  Local patches replace one order in place; a reload
replaces the whole list.  Concurrent writers are not coordinated: the last
write wins.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

import structlog
from django.conf import settings
from django.core.cache import caches

from modules.orders.constants import OrderType
from modules.orders.dtos import OrderDTO
from modules.orders.exceptions import OrderNotFound

logger = structlog.get_logger(__name__)


class OrderListStore:
    key_prefix = "orders"

    def __init__(self, alias: str = "default", timeout: Optional[int] = None) -> None:
        self._alias = alias
        self.timeout = (
            timeout if timeout is not None else settings.ORDERS_CACHE_TIMEOUT
        )

    @property
    def _cache(self):
        return caches[self._alias]

    def key(self, tipo: str) -> str:
        return f"{self.key_prefix}:{OrderType(tipo)}"

    def get_list(self, tipo: str) -> Optional[List[OrderDTO]]:
        """Cached list of the family, or ``None`` when it was never loaded."""
        raw = self._cache.get(self.key(tipo))
        if raw is None:
            return None
        return [OrderDTO.model_validate(item) for item in raw]

    def replace(self, tipo: str, orders: Iterable[OrderDTO]) -> List[OrderDTO]:
        orders = list(orders)
        self._cache.set(
            self.key(tipo), [order.to_cache() for order in orders], self.timeout
        )
        logger.debug("orders.list_stored", tipo=str(tipo), count=len(orders))
        return orders

    def get(self, tipo: str, id: int) -> Optional[OrderDTO]:
        for order in self.get_list(tipo) or []:
            if order.id == id:
                return order
        return None

    def patch(self, tipo: str, id: int, **changes: Any) -> OrderDTO:
        """Apply *changes* to the cached order *id* and store the list.

        Raises:
            OrderNotFound: the order is not in the cached list.
        """
        orders = self.get_list(tipo) or []
        for index, order in enumerate(orders):
            if order.id == id:
                patched = order.with_changes(**changes)
                orders[index] = patched
                self.replace(tipo, orders)
                logger.info(
                    "orders.patched", tipo=str(tipo), order_id=id, fields=sorted(changes)
                )
                return patched
        raise OrderNotFound(f"Order {id} ({tipo}) is not loaded")

    def clear(self, tipo: Optional[str] = None) -> None:
        tipos = [tipo] if tipo is not None else list(OrderType)
        self._cache.delete_many([self.key(t) for t in tipos])

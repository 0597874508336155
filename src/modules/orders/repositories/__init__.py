"""Order repositories package."""

from modules.orders.repositories.http_repository import OrderHttpRepository
from modules.orders.repositories.interfaces import IOrderRepository

__all__ = ["IOrderRepository", "OrderHttpRepository"]

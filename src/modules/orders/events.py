"""Domain events for the Orders bounded context.

The Order API pushes a notification whenever any order of a family
changes; it names the family, not the order.  Each push name maps to one
event class whose ``order_type`` tells listeners which list to reload.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, Type

from modules.orders.constants import (
    PUSH_EVENT_ORDEN_COMPRA,
    PUSH_EVENT_ORDEN_SERVICIO,
    OrderType,
)
from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrdersChanged(DomainEvent):
    """Raised when orders of one family changed on the server."""

    order_type: ClassVar[str]


@dataclass(frozen=True)
class OrdenCompraUpdated(OrdersChanged):
    order_type: ClassVar[str] = OrderType.COMPRA


@dataclass(frozen=True)
class OrdenServicioUpdated(OrdersChanged):
    order_type: ClassVar[str] = OrderType.SERVICIO


PUSH_EVENT_CLASSES: Dict[str, Type[OrdersChanged]] = {
    PUSH_EVENT_ORDEN_COMPRA: OrdenCompraUpdated,
    PUSH_EVENT_ORDEN_SERVICIO: OrdenServicioUpdated,
}

EVENT_CLASSES_BY_TYPE: Dict[str, Type[OrdersChanged]] = {
    cls.order_type: cls for cls in PUSH_EVENT_CLASSES.values()
}

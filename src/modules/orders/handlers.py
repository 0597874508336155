"""Event handlers for Orders domain events."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from modules.orders.events import OrdersChanged
from shared.domain.bus import IEventHandler

if TYPE_CHECKING:
    from modules.orders.board import OrderBoard

logger = structlog.get_logger(__name__)


class OrderListReloadHandler(IEventHandler[OrdersChanged]):
    """Reloads one family's list on a board when the server reports changes."""

    def __init__(self, board: OrderBoard, order_type: str) -> None:
        self.board = board
        self.order_type = order_type

    def handle(self, event: OrdersChanged) -> None:
        logger.info(
            "orders.push_received",
            event_name=event.event_name,
            tipo=str(self.order_type),
            role=str(self.board.role),
        )
        self.board.load(self.order_type)

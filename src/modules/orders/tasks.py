"""Celery tasks for the Orders module."""

from __future__ import annotations

from typing import Dict

import structlog
from celery import shared_task

from modules.orders import container
from modules.orders.constants import OrderType
from modules.orders.exceptions import OrderApiError

logger = structlog.get_logger(__name__)


@shared_task(name="orders.refresh_order_lists")
def refresh_order_lists() -> Dict[str, int]:
    """Reload every order family into the shared store.

    Runs on the beat schedule (``ORDERS_POLL_INTERVAL``).  A failed family
    is logged and keeps its previous list; the next run retries.
    """
    store = container.get_order_store()
    counts: Dict[str, int] = {}
    for tipo in OrderType:
        try:
            orders = container.get_order_repository(tipo).list()
        except OrderApiError as exc:
            logger.warning(
                "orders.refresh_failed",
                tipo=str(tipo),
                error=exc.message,
                status_code=exc.status_code,
            )
            continue
        store.replace(tipo, orders)
        counts[str(tipo)] = len(orders)
    logger.info("orders.refresh_completed", counts=counts)
    return counts

"""Composition root of the Orders module.

Builds the collaborators the views, the push webhook and the Celery task
share.  The process event bus lives here and nowhere else; callers go
through these functions (not module globals) so tests can replace them.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Dict

from django.conf import settings

from modules.core.http import ApiClient, get_http_session
from modules.orders.constants import OrderType
from modules.orders.exceptions import OrderApiError
from modules.orders.merge import PdfDocumentMerger
from modules.orders.repositories.http_repository import OrderHttpRepository
from modules.orders.repositories.interfaces import IOrderRepository
from modules.orders.store import OrderListStore
from shared.infrastructure.bus import InMemoryEventBus


@lru_cache(maxsize=1)
def get_event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


def get_api_client() -> ApiClient:
    return ApiClient(
        settings.ORDERS_API_BASE_URL,
        timeout=settings.ORDERS_API_TIMEOUT,
        session=get_http_session(),
        error_class=OrderApiError,
    )


def get_order_repository(tipo: str) -> IOrderRepository:
    return OrderHttpRepository(get_api_client(), tipo)


def get_order_repositories() -> Dict[str, IOrderRepository]:
    return {tipo: get_order_repository(tipo) for tipo in OrderType}


def get_order_store() -> OrderListStore:
    return OrderListStore()


def get_document_merger() -> PdfDocumentMerger:
    return PdfDocumentMerger()
